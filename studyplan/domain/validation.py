import re
from datetime import date, datetime

from studyplan.domain.enums import Priority


### COMMENTS
# ==========================================================
# Koercja danych wejściowych (domain/validation.py).
# ==========================================================
# Niepoprawne wartości priority/target/current są normalizowane do bezpiecznej
# wartości domyślnej zamiast odrzucenia. Każdy zapis w serwisach przechodzi przez te
# funkcje, więc niezmienniki (priorytet z zamkniętego zestawu, 1 <= target,
# 0 <= current <= target) obowiązują niezależnie od źródła danych (CLI, storage, testy).

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def validate_priority(raw) -> Priority:
    """Zwraca pasujący Priority; wszystko spoza low/medium/high staje się medium."""
    if isinstance(raw, Priority):
        return raw
    if isinstance(raw, str):
        try:
            return Priority(raw)
        except ValueError:
            pass
    return Priority.MEDIUM


def parse_int(raw) -> int | None:
    """
    Parsuje wiodącą liczbę całkowitą z `raw`.

    - int -> bez zmian, float -> obcięty w stronę zera
    - str -> wiodące cyfry ("12abc" -> 12, "3.7" -> 3, " -5" -> -5)
    - bool, None i wszystko nieparsowalne -> None
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw != raw or raw in (float("inf"), float("-inf")):
            return None
        return int(raw)
    if isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        if match:
            return int(match.group(1))
    return None


def coerce_target(raw) -> int:
    """Target celu: brak, zero lub wartość nienumeryczna liczy się jako 1, potem clamp do >= 1."""
    value = parse_int(raw) or 1
    return max(1, value)


def coerce_current(raw, target: int) -> int:
    """Postęp celu: wartość nienumeryczna = 0, potem clamp do [0, target]."""
    value = parse_int(raw) or 0
    return min(max(0, value), target)


def parse_due_date(raw) -> date | None:
    """Parsuje datę kalendarzową ISO (YYYY-MM-DD); zwraca None, gdy się nie da."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


def clean_text(raw) -> str | None:
    """Przycina opcjonalny tekst; pusty wynik -> None."""
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None
