from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from excedencia.engine.ruleset import load_ruleset
from excedencia.engine.salvage import extract_validation_errors
from excedencia.engine.shaping import reshape_response, to_engine_context
from excedencia.errors import (
    EngineFailure,
    ExcedenciaError,
    InternalExecutionFailure,
    SerializationFailure,
    ValidationFailure,
)
from excedencia.logs import get_logger
from excedencia.models.scenario import EngineRequest, EvaluationResponse

logger = get_logger(__name__)


def _zen_engine() -> Any:
    import zen

    return zen.ZenEngine()


class ExcedenciaDecisionEngine:
    """
    Runs one evaluation of the excedencia ruleset.

    The ZEN engine holds native state that is not safe to hand between
    event loops, so by default construction and evaluation happen together
    on a worker thread with its own loop; only plain values cross back.
    """

    def __init__(
        self,
        ruleset_path: Optional[str] = None,
        isolate: bool = True,
        engine_factory: Callable[[], Any] = _zen_engine,
    ):
        self.ruleset_path = ruleset_path
        self.isolate = isolate
        self.engine_factory = engine_factory

    async def evaluate(self, request: EngineRequest) -> EvaluationResponse:
        logger.info(
            "evaluation_started",
            parentesco=request.input.parentesco,
            situacion=request.input.situacion,
            isolated=self.isolate,
        )
        if not self.isolate:
            return await self._evaluate(request)

        try:
            response, failure = await asyncio.to_thread(self._evaluate_isolated, request)
        except Exception as e:
            logger.error("evaluation_worker_failed", error=f"{type(e).__name__}: {e}")
            raise InternalExecutionFailure(f"{type(e).__name__}: {e}") from e

        if failure is not None:
            raise failure
        return response

    def _evaluate_isolated(self, request: EngineRequest):
        # Evaluation failures come back as values; anything that escapes
        # this function is the worker itself breaking.
        try:
            return asyncio.run(self._evaluate(request)), None
        except ExcedenciaError as e:
            return None, e

    async def _evaluate(self, request: EngineRequest) -> EvaluationResponse:
        try:
            content = load_ruleset(self.ruleset_path)
            decision = self.engine_factory().create_decision(content)
        except Exception as e:
            raise EngineFailure(f"no se pudo cargar la decisión: {type(e).__name__}: {e}") from e

        try:
            context = to_engine_context(request)
        except (TypeError, ValueError) as e:
            raise SerializationFailure(str(e)) from e

        try:
            result = await decision.async_evaluate(context)
        except Exception as e:
            raise self._classify(e) from e

        raw = result.get("result") if isinstance(result, dict) else None
        response = reshape_response(raw, request)
        logger.info(
            "evaluation_finished",
            supuesto=response.output.case_label.value,
            importe=response.output.monthly_amount,
        )
        return response

    @staticmethod
    def _classify(error: Exception) -> ExcedenciaError:
        issues = extract_validation_errors(error)
        if issues:
            logger.info("evaluation_rejected", issues=len(issues))
            return ValidationFailure(issues)
        logger.warning("engine_failure", error=str(error))
        return EngineFailure(str(error))
