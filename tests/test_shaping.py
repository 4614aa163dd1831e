import json

import pytest

from excedencia.engine.shaping import (
    echo_input,
    reshape_response,
    response_to_json,
    shape_request,
    to_engine_context,
)
from excedencia.errors import SerializationFailure
from excedencia.models.scenario import ScenarioInput
from excedencia.models.types import CaseLabel


def mk(relationship="madre", trigger="parto", single=True, children=1.0):
    return ScenarioInput(
        relationship=relationship,
        trigger=trigger,
        single_parent_family=single,
        child_count=children,
    )


def engine_output(**overrides):
    out = {
        "descripcion": "Supuesto E: familia monoparental",
        "importe_mensual": 500,
        "requisitos_adicionales": "Título de familia monoparental",
        "supuesto": "E",
        "tiene_derecho_potencial": True,
        "errores": [],
        "advertencias": ["aviso"],
    }
    out.update(overrides)
    return out


def test_shape_request_nests_in_engine_vocabulary():
    req = shape_request(mk())
    assert req.input.parentesco == "madre"
    assert req.input.situacion == "parto"
    assert req.input.familia_monoparental is True
    assert req.input.numero_hijos == 1.0


def test_round_trip_through_engine_shape():
    for s in (mk(), mk("padre", "enfermedad", False, None), mk("hijo", "accidente", False, 4.0)):
        assert echo_input(shape_request(s)) == s


def test_engine_context_omits_missing_child_count():
    ctx = to_engine_context(shape_request(mk(children=None)))
    assert ctx == {
        "input": {"parentesco": "madre", "situacion": "parto", "familia_monoparental": True}
    }


def test_reshape_keeps_only_caller_fields():
    req = shape_request(mk())
    raw = {
        "output": engine_output(regla_interna="rule-e", puntuacion=12),
        "parentesco_valido": True,
        "trazas": {"nodo": "x"},
    }
    resp = reshape_response(raw, req)
    assert resp.output.case_label == CaseLabel.E
    assert resp.output.monthly_amount == 500
    assert resp.output.has_potential_entitlement is True
    assert resp.output.warnings == ["aviso"]
    assert resp.input == mk()
    assert resp.relationship_valid is True
    assert "regla_interna" not in resp.output.model_dump()


def test_reshape_defaults_optional_lists():
    out = engine_output()
    del out["errores"], out["advertencias"], out["requisitos_adicionales"]
    resp = reshape_response({"output": out}, shape_request(mk()))
    assert resp.output.errors == []
    assert resp.output.warnings == []
    assert resp.output.additional_requirements == ""
    assert resp.relationship_valid is None


def test_reshape_malformed_output_is_serialization_failure():
    with pytest.raises(SerializationFailure):
        reshape_response({"output": {"descripcion": "x"}}, shape_request(mk()))
    with pytest.raises(SerializationFailure):
        reshape_response(None, shape_request(mk()))


def test_response_json_is_camel_case_and_skips_nulls():
    resp = reshape_response({"output": engine_output()}, shape_request(mk(children=None)))
    data = json.loads(response_to_json(resp))
    assert data["output"]["caseLabel"] == "E"
    assert data["output"]["monthlyAmount"] == 500
    assert data["output"]["hasPotentialEntitlement"] is True
    assert data["input"] == {"relationship": "madre", "trigger": "parto", "singleParentFamily": True}
    assert "relationshipValid" not in data
