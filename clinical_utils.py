"""Date, numeric and row helpers for the transplant dashboard.

Every helper here is total: malformed or missing input comes back as None,
False or a "-" placeholder instead of raising, so page code can render
whatever it gets.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Final, TypedDict
from urllib.parse import parse_qs, quote, urlsplit

TARGET_RANGE_COLUMN: Final = "Target Trough Range (ng/mL)"
TROUGH_C0_COLUMN: Final = "Drug Trough C0 (ng/mL)"

# Tacrolimus trough reference range, ng/mL.
C0_REFERENCE_LOW: Final = 5.0
C0_REFERENCE_HIGH: Final = 12.0

DOSAGE_PAGE: Final = "predicted-dosage-trend.html"

_DECIMAL_RE = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_FLOAT_PREFIX_RE = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_INT_PREFIX_RE = re.compile(r"\s*([+-]?\d+)")
# Characters encodeURIComponent leaves alone besides letters, digits and "_.-~".
_URI_COMPONENT_SAFE = "!*'()"
_WIDE_CONTEXT = Context(prec=400)


class Range(TypedDict):
    lo: float
    hi: float


def _to_number(value: Any) -> float:
    """Loose number conversion: blank text is 0, junk and None are NaN."""
    if value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return 0.0
    if not _DECIMAL_RE.fullmatch(text):
        return math.nan
    return float(text)


def _parse_float(text: str) -> float:
    match = _FLOAT_PREFIX_RE.match(text)
    return float(match.group(1)) if match else math.nan


def _parse_int(text: str) -> float:
    match = _INT_PREFIX_RE.match(text)
    return float(int(match.group(1))) if match else math.nan


def parse_dmy(text: Any) -> date | None:
    """Parse ``dd/mm/yyyy`` text.

    A zero (or non-numeric) day, month or year is rejected. Day overflow rolls
    forward the way date arithmetic does, so ``31/02/2021`` is 3 March 2021;
    months outside 1-12 are rejected. Fractional components are truncated.
    Years are limited to what ``datetime.date`` holds (1-9999), so a five-digit
    year also gives None.
    """
    if not text or not isinstance(text, str):
        return None
    parts = text.split("/")
    if len(parts) != 3:
        return None
    numbers = [_to_number(part) for part in parts]
    if any(not math.isfinite(number) or number == 0 for number in numbers):
        return None
    day, month, year = (int(number) for number in numbers)
    if not 1 <= month <= 12:
        return None
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def fmt_dmy(value: Any) -> str:
    if not isinstance(value, date):
        return "-"
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def age_from_dob(text: Any, today: date | None = None) -> int | None:
    dob = parse_dmy(text)
    if dob is None:
        return None
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def bmi(weight_kg: Any, height_cm: Any) -> str | None:
    """Body-mass index as text with one decimal, e.g. ``"22.9"``."""
    weight = _to_number(weight_kg)
    height = _to_number(height_cm)
    if not math.isfinite(weight) or not math.isfinite(height) or height <= 0:
        return None
    metres = height / 100
    if metres * metres == 0:
        return None
    value = Decimal(weight / (metres * metres))
    if not value.is_finite():
        return None
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP, context=_WIDE_CONTEXT))


def parse_range(text: Any) -> Range | None:
    """Parse ``"5-12"`` or ``"5–12"`` into ``{"lo": 5.0, "hi": 12.0}``."""
    if not text:
        return None
    parts = str(text).replace("–", "-", 1).split("-")
    if len(parts) != 2:
        return None
    lo = _parse_float(parts[0])
    hi = _parse_float(parts[1])
    if not math.isfinite(lo) or not math.isfinite(hi):
        return None
    return {"lo": lo, "hi": hi}


def in_therapeutic_range_c0(c0: Any) -> bool | None:
    value = _to_number(c0)
    if not math.isfinite(value):
        return None
    return C0_REFERENCE_LOW <= value <= C0_REFERENCE_HIGH


def in_target_for_row(row: Mapping[str, Any]) -> bool | None:
    if not isinstance(row, Mapping):
        return None
    target = parse_range(row.get(TARGET_RANGE_COLUMN))
    c0 = _to_number(row.get(TROUGH_C0_COLUMN))
    if target is None or not math.isfinite(c0):
        return None
    return target["lo"] <= c0 <= target["hi"]


def in_age_group(age: Any, group: str | None) -> bool:
    """Check an age against a group such as ``"30-49"`` or ``"70+"``.

    An empty group means no restriction. Unreadable bounds compare as NaN,
    which makes the check false.
    """
    if age is None:
        return False
    if not group:
        return True
    value = _to_number(age)
    text = str(group)
    if text.endswith("+"):
        return value >= _parse_int(text)
    parts = text.split("-")
    lo = _to_number(parts[0])
    hi = _to_number(parts[1]) if len(parts) > 1 else math.nan
    return lo <= value <= hi


def get_param(url: str, name: str) -> str | None:
    try:
        query = urlsplit(url).query
    except ValueError:
        return None
    values = parse_qs(query, keep_blank_values=True).get(name)
    return values[0] if values else None


def dosage_link(patient_id: Any) -> str:
    return f"{DOSAGE_PAGE}?patient={quote(str(patient_id), safe=_URI_COMPONENT_SAFE)}"
