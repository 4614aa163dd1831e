from typing import Annotated, Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from excedencia.config.settings import Settings, get_settings
from excedencia.engine.orchestrator import ExcedenciaDecisionEngine
from excedencia.engine.service import build_engine, evaluate_scenario
from excedencia.engine.shaping import response_to_json
from excedencia.errors import ExcedenciaError
from excedencia.logs import get_logger
from excedencia.models.types import MONTHLY_AMOUNTS, CaseLabel, Relationship, Trigger, vocabulary

logger = get_logger(__name__)

TOOL_NAME = "evaluar_supuesto_excedencia"

TOOL_DESCRIPTION = (
    "Evalúa el derecho a ayuda para excedencia según la normativa de Navarra 2025. "
    "Determina supuesto (A-E) e importe (0€/500€/725€). "
    "SUPUESTOS: A=Cuidado familiar enfermo (725€), B=Tercer hijo+ (500€), C=Adopción (500€), "
    "D=Múltiple (500€), E=Monoparental (500€). "
    f"USE VALORES EXACTOS: relationship ({vocabulary(Relationship)}), "
    f"trigger ({vocabulary(Trigger)}), singleParentFamily (true/false), childCount (número)."
)

_CASES = {
    CaseLabel.A: "Cuidado familiar enfermo/accidentado",
    CaseLabel.B: "Tercer hijo+ con recién nacido",
    CaseLabel.C: "Adopción/acogimiento",
    CaseLabel.D: "Partos/adopciones múltiples",
    CaseLabel.E: "Familias monoparentales",
}


def server_instructions() -> str:
    lines = [
        "Calculadora de ayudas para excedencia según la normativa de Navarra 2025.",
        "",
        "** INSTRUCCIONES IMPORTANTES PARA USO DE HERRAMIENTAS **",
        "",
        "1. SIEMPRE use los valores EXACTOS especificados para cada parámetro, CASE SENSITIVE",
        f"2. Para relationship, use ÚNICAMENTE: {vocabulary(Relationship)}",
        f"3. Para trigger, use ÚNICAMENTE: {vocabulary(Trigger)}",
        "4. Para singleParentFamily, use ÚNICAMENTE: true (familias monoparentales) o false",
        "5. Para childCount, use números enteros (ej: 1, 2, 3, 4, 5)",
        "",
        "EJEMPLOS DE USO CORRECTO:",
        "• Padre soltero con bebé: relationship='padre', trigger='parto', singleParentFamily=true, childCount=1",
        "• Hijo cuidando a padre enfermo: relationship='padre', trigger='enfermedad', singleParentFamily=false",
        "• Familia con tercer hijo: relationship='madre', trigger='parto', singleParentFamily=false, childCount=3",
        "",
        "SUPUESTOS EVALUADOS:",
    ]
    for label, text in _CASES.items():
        lines.append(f"{label.value}) {text} ({MONTHLY_AMOUNTS[label]}€/mes)")
    return "\n".join(lines)


async def call_evaluation(
    arguments: Dict[str, Any],
    engine: Optional[ExcedenciaDecisionEngine] = None,
) -> str:
    """
    Run the tool for raw arguments. Success is the pretty JSON response;
    every failure becomes a ToolError carrying the human-readable report.
    """
    try:
        response = await evaluate_scenario(arguments, engine=engine)
    except ExcedenciaError as e:
        logger.info("tool_call_failed", kind=type(e).__name__)
        raise ToolError(e.report()) from e
    return response_to_json(response)


def build_server(
    settings: Optional[Settings] = None,
    engine: Optional[ExcedenciaDecisionEngine] = None,
) -> FastMCP:
    settings = settings or get_settings()
    engine = engine or build_engine(settings)

    server = FastMCP(
        settings.server.name,
        instructions=server_instructions(),
        host=settings.server.host,
        port=settings.server.port,
        streamable_http_path=settings.server.path,
    )

    @server.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
    async def evaluar_supuesto_excedencia(
        relationship: Annotated[str, Field(description=(
            "Relación familiar con la persona que necesita cuidado. "
            f"VALORES VÁLIDOS: {vocabulary(Relationship)}. Ejemplo: 'madre'"
        ))],
        trigger: Annotated[str, Field(description=(
            "Situación que motiva la necesidad de cuidado. "
            f"VALORES VÁLIDOS: {vocabulary(Trigger)}. Ejemplo: 'parto'"
        ))],
        singleParentFamily: Annotated[Any, Field(description=(
            "¿Es una familia monoparental? Acepta booleanos (true/false) o strings ('true'/'false'). "
            "Ejemplo: true"
        ))],
        childCount: Annotated[Any, Field(description=(
            "Número total de hijos incluyendo al recién nacido (requerido para Supuesto B). "
            "Acepta números (3) o strings ('3'). Ejemplo: 3"
        ))] = None,
    ) -> str:
        return await call_evaluation(
            {
                "relationship": relationship,
                "trigger": trigger,
                "singleParentFamily": singleParentFamily,
                "childCount": childCount,
            },
            engine=engine,
        )

    logger.info(
        "server_built",
        name=settings.server.name,
        version=settings.server.version,
        transport=settings.server.transport,
    )
    return server


def serve(settings: Optional[Settings] = None, transport: Optional[str] = None) -> None:
    settings = settings or get_settings()
    build_server(settings).run(transport=transport or settings.server.transport)
