from enum import Enum

class Relationship(str, Enum):
    PADRE = "padre"
    MADRE = "madre"
    HIJO = "hijo"
    HIJA = "hija"
    CONYUGE = "conyuge"
    PAREJA = "pareja"
    ESPOSO = "esposo"
    ESPOSA = "esposa"
    MUJER = "mujer"
    MARIDO = "marido"

class Trigger(str, Enum):
    PARTO = "parto"
    ADOPCION = "adopcion"
    ACOGIMIENTO = "acogimiento"
    PARTO_MULTIPLE = "parto_multiple"
    ADOPCION_MULTIPLE = "adopcion_multiple"
    ACOGIMIENTO_MULTIPLE = "acogimiento_multiple"
    ENFERMEDAD = "enfermedad"
    ACCIDENTE = "accidente"

class CaseLabel(str, Enum):
    A = "A"  # cuidado familiar enfermo/accidentado
    B = "B"  # tercer hijo o más
    C = "C"  # adopción/acogimiento
    D = "D"  # parto/adopción múltiple
    E = "E"  # familia monoparental
    NONE = ""

# Monthly amounts in euros per supuesto.
MONTHLY_AMOUNTS = {
    CaseLabel.A: 725,
    CaseLabel.B: 500,
    CaseLabel.C: 500,
    CaseLabel.D: 500,
    CaseLabel.E: 500,
    CaseLabel.NONE: 0,
}

def vocabulary(enum_cls) -> str:
    return ", ".join(f"'{m.value}'" for m in enum_cls)
