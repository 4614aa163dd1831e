from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import ValidationError

from excedencia.config.settings import Settings, get_settings
from excedencia.engine.orchestrator import ExcedenciaDecisionEngine
from excedencia.engine.shaping import shape_request
from excedencia.errors import DecodingFailure
from excedencia.models.scenario import EvaluationResponse, ScenarioInput


def decode_params(params: Mapping[str, Any]) -> ScenarioInput:
    """Raw caller arguments (camelCase or snake_case keys) -> ScenarioInput."""
    try:
        return ScenarioInput.model_validate(dict(params))
    except ValidationError as e:
        raise DecodingFailure.from_validation_error(e) from e


def build_engine(settings: Optional[Settings] = None) -> ExcedenciaDecisionEngine:
    settings = settings or get_settings()
    return ExcedenciaDecisionEngine(
        ruleset_path=settings.ruleset.path,
        isolate=settings.evaluation.isolate,
    )


async def evaluate_scenario(
    params: Mapping[str, Any],
    engine: Optional[ExcedenciaDecisionEngine] = None,
) -> EvaluationResponse:
    """Decode -> shape -> evaluate. Raises an ExcedenciaError subclass on failure."""
    scenario = decode_params(params)
    engine = engine or build_engine()
    return await engine.evaluate(shape_request(scenario))
