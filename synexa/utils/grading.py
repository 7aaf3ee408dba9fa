"""
Angolan grading rules (scale 0-20)

- MT (média trimestral) is the mean of MAC, NPP and NPT
- A subject is passed with 10 or more
- Qualitative classification bands follow the Angolan report card
"""
from typing import Iterable, Optional, Tuple

PASS_MARK = 10.0

CLASSIFICATION_BANDS = (
    (17.0, "Excelente"),
    (14.0, "Muito Bom"),
    (12.0, "Bom"),
    (10.0, "Satisfatório"),
)

SHIFT_LABELS = {
    "MORNING": "Manhã",
    "AFTERNOON": "Tarde",
    "EVENING": "Noite",
}

# Wording used on certificates and declarations
SHIFT_PERIOD_LABELS = {
    "MORNING": "Matutino",
    "AFTERNOON": "Vespertino",
    "EVENING": "Noturno",
}

TERM_LABELS = {1: "1º Trimestre", 2: "2º Trimestre", 3: "3º Trimestre"}


def term_mt(mac: Optional[float], npp: Optional[float], npt: Optional[float]) -> Tuple[float, str]:
    """
    Official term average.

    Every component is required: a missing one yields (0, "INCOMPLETO").
    Otherwise MT is rounded to one decimal and compared with the pass mark.
    """
    if mac is None or npp is None or npt is None:
        return 0.0, "INCOMPLETO"
    mt = round((mac + npp + npt) / 3, 1)
    return mt, "APROVADO" if mt >= PASS_MARK else "REPROVADO"


def calculate_mt(mac: Optional[float], npp: Optional[float], npt: Optional[float]) -> Optional[float]:
    """Report-card MT: mean of the components already launched, 2 decimals"""
    parts = [v for v in (mac, npp, npt) if v is not None]
    if not parts:
        return None
    return round(sum(parts) / len(parts), 2)


def classify(grade: Optional[float]) -> str:
    if grade is None:
        return "Não Avaliado"
    for threshold, label in CLASSIFICATION_BANDS:
        if grade >= threshold:
            return label
    return "Não Satisfatório"


def final_status(mts: Iterable[Optional[float]]) -> str:
    """Aprovado only when every evaluated subject reaches the pass mark"""
    values = [mt for mt in mts if mt is not None]
    if not values:
        return "Sem Avaliação"
    return "Aprovado" if all(mt >= PASS_MARK for mt in values) else "Reprovado"


def general_average(values: Iterable[Optional[float]], digits: int = 2) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), digits)


def format_shift(shift) -> str:
    key = getattr(shift, "value", shift)
    return SHIFT_LABELS.get(key, str(key))


def format_shift_period(shift) -> str:
    key = getattr(shift, "value", shift)
    return SHIFT_PERIOD_LABELS.get(key, str(key))


def format_academic_year(year: int) -> str:
    """2025 -> '2025/2026'"""
    return f"{year}/{year + 1}"
