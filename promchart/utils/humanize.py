"""
SI number formatting for chart axes and tooltips.

humanize_number_si(1313546240) -> HumanizedValue(string='1.31G', value=1.31, unit='G')
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

SI_UNITS = ["", "k", "M", "G", "T", "P", "E"]
SI_DIVISOR = 1000


@dataclass(frozen=True)
class HumanizedValue:
    string: str
    value: float
    unit: str = ""


def get_default_fraction_digits(value: float) -> int:
    if value < 1:
        return 3
    if value < 100:
        return 2
    return 1


def convert_base_value_to_units(
    value: float,
    units: List[str],
    divisor: float,
    initial_unit: Optional[str] = None
) -> Tuple[float, str]:
    """Divide value down the unit ladder, optionally starting at initial_unit."""
    remaining = list(units[units.index(initial_unit):] if initial_unit else units)
    unit = remaining.pop(0)
    while value >= divisor and remaining:
        value = value / divisor
        unit = remaining.pop(0)
    return value, unit


def round_value(value: float) -> float:
    """Round to the magnitude's default precision, halves rounding up."""
    if not math.isfinite(value):
        return 0
    multiplier = 10 ** get_default_fraction_digits(value)
    return math.floor(value * multiplier + 0.5) / multiplier


def format_number(value: float) -> str:
    """Group thousands and keep at most the default fraction digits."""
    fraction_digits = get_default_fraction_digits(value)
    # Also turns -0 into 0
    if not math.isfinite(value) or value == 0:
        value = 0
    text = f"{value:,.{fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def humanize_number_si(v: float) -> HumanizedValue:
    """Format a number with an SI suffix, e.g. 1313546240 -> '1.31G'."""
    if v is None or not math.isfinite(v):
        v = 0
    if v < 0:
        positive = humanize_number_si(-v)
        return HumanizedValue(
            string="-" + positive.string if positive.value else positive.string,
            value=-positive.value if positive.value else 0,
            unit=positive.unit,
        )

    value, unit = convert_base_value_to_units(v, SI_UNITS, SI_DIVISOR)
    # Rounding may carry 999.96 up to 1000.0, so walk the ladder again
    value, unit = convert_base_value_to_units(round_value(value), SI_UNITS, SI_DIVISOR, unit)

    return HumanizedValue(string=format_number(value) + unit, value=value, unit=unit)


def to_exponential(v: float, fraction_digits: int = 1) -> str:
    """Exponential notation without zero-padded exponents: 1.2e-4, 1.0e+25."""
    mantissa, exponent = f"{v:.{fraction_digits}e}".split("e")
    sign = exponent[0]
    digits = exponent[1:].lstrip("0") or "0"
    return f"{mantissa}e{sign}{digits}"


def format_positive_value(v: float) -> str:
    # Exponential notation keeps tiny and huge labels short
    if v == 0 or (0.001 <= v < 1e23):
        return humanize_number_si(v).string
    return to_exponential(v)


def format_value(v: float) -> str:
    """Axis and tooltip formatter for any sample value."""
    if v is None or math.isnan(v):
        return ""
    if math.isinf(v):
        return "-Inf" if v < 0 else "+Inf"
    return ("-" if v < 0 else "") + format_positive_value(abs(v))
