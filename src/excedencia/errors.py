from __future__ import annotations

from typing import List, Sequence

from pydantic import ValidationError

from excedencia.models.scenario import ValidationIssue


class ExcedenciaError(Exception):
    """Base for every failure an evaluation can end in."""

    def report(self) -> str:
        return f"Error al evaluar: {self}"


class DecodingFailure(ExcedenciaError):
    """Caller input could not be coerced to bool/number."""

    def __init__(self, problems: Sequence[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "DecodingFailure":
        problems = []
        for err in exc.errors():
            field = ".".join(str(p) for p in err.get("loc", ())) or "input"
            cause = (err.get("ctx") or {}).get("error")
            problems.append(f"{field}: {cause if cause is not None else err.get('msg')}")
        return cls(problems)

    def report(self) -> str:
        return f"Error de decodificación: {self}"


class ValidationFailure(ExcedenciaError):
    """The ruleset rejected the input against its own schema."""

    def __init__(self, issues: Sequence[ValidationIssue]):
        self.issues: List[ValidationIssue] = list(issues)
        super().__init__(self._render("  - {path}: {message}\n"))

    def _render(self, line: str) -> str:
        out = "Errores de validación:\n"
        for issue in self.issues:
            out += line.format(path=issue.path, message=issue.message)
        return out

    def report(self) -> str:
        return self._render("  - Campo '{path}': {message}\n")


class EngineFailure(ExcedenciaError):
    """The rules engine failed for a reason other than input validation."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Error del motor de decisión: {detail}")


class SerializationFailure(ExcedenciaError):
    """Request or engine result did not match the wire contract."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Error de serialización: {detail}")


class InternalExecutionFailure(ExcedenciaError):
    """The isolated worker running the evaluation died."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)

    def report(self) -> str:
        return f"Error interno: {self.detail}"
