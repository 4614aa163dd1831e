from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from excedencia.models.decoding import decode_bool, decode_number
from excedencia.models.types import CaseLabel

LenientBool = Annotated[bool, BeforeValidator(decode_bool)]
LenientNumber = Annotated[Optional[float], BeforeValidator(decode_number)]


class _CallerModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# --- caller-facing (flat, permissive) ---

class ScenarioInput(_CallerModel):
    relationship: str  # checked by the ruleset schema, not here
    trigger: str
    single_parent_family: LenientBool
    child_count: LenientNumber = None


class EvaluationOutcome(_CallerModel):
    description: str
    monthly_amount: int
    additional_requirements: str = ""
    case_label: CaseLabel
    has_potential_entitlement: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class EvaluationResponse(_CallerModel):
    output: EvaluationOutcome
    input: Optional[ScenarioInput] = None
    relationship_valid: Optional[bool] = None


# --- engine-facing (nested, ruleset vocabulary) ---

class EngineInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    parentesco: str
    situacion: str
    familia_monoparental: LenientBool
    numero_hijos: LenientNumber = None


class EngineRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: EngineInput


class EngineOutput(BaseModel):
    """Ruleset output contract; carries bookkeeping keys we drop on the way out."""
    model_config = ConfigDict(extra="ignore")

    descripcion: str
    importe_mensual: int
    requisitos_adicionales: str = ""
    supuesto: CaseLabel
    tiene_derecho_potencial: bool
    errores: List[str] = Field(default_factory=list)
    advertencias: List[str] = Field(default_factory=list)


class EngineResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    output: EngineOutput
    parentesco_valido: Optional[bool] = None


# --- validation reports ---

class ValidationIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    path: str


class ValidationErrorSource(BaseModel):
    errors: List[ValidationIssue]


class ValidationErrorDetails(BaseModel):
    source: ValidationErrorSource
    error_type: str = Field(alias="type")
