from __future__ import annotations

from typing import Any, Dict

from pydantic import ValidationError

from excedencia.errors import SerializationFailure
from excedencia.models.scenario import (
    EngineInput,
    EngineRequest,
    EngineResult,
    EvaluationOutcome,
    EvaluationResponse,
    ScenarioInput,
)


def shape_request(params: ScenarioInput) -> EngineRequest:
    """Flat caller parameters -> {"input": {...}} in the ruleset's vocabulary."""
    return EngineRequest(
        input=EngineInput(
            parentesco=params.relationship,
            situacion=params.trigger,
            familia_monoparental=params.single_parent_family,
            numero_hijos=params.child_count,
        )
    )


def echo_input(request: EngineRequest) -> ScenarioInput:
    inp = request.input
    return ScenarioInput(
        relationship=inp.parentesco,
        trigger=inp.situacion,
        single_parent_family=inp.familia_monoparental,
        child_count=inp.numero_hijos,
    )


def to_engine_context(request: EngineRequest) -> Dict[str, Any]:
    # numero_hijos is left out entirely when absent
    return request.model_dump(mode="json", exclude_none=True)


def reshape_response(raw: Any, request: EngineRequest) -> EvaluationResponse:
    """
    Keep only the caller-facing fields of the ruleset output and echo the
    request back. A result that does not fit the output contract is a
    serialization failure, not a validation one.
    """
    try:
        result = EngineResult.model_validate(raw)
    except ValidationError as e:
        raise SerializationFailure(str(e)) from e

    out = result.output
    return EvaluationResponse(
        output=EvaluationOutcome(
            description=out.descripcion,
            monthly_amount=out.importe_mensual,
            additional_requirements=out.requisitos_adicionales,
            case_label=out.supuesto,
            has_potential_entitlement=out.tiene_derecho_potencial,
            errors=out.errores,
            warnings=out.advertencias,
        ),
        input=echo_input(request),
        relationship_valid=result.parentesco_valido,
    )


def response_to_json(response: EvaluationResponse) -> str:
    return response.model_dump_json(by_alias=True, exclude_none=True, indent=2)
