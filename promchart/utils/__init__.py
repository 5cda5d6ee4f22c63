"""Formatting utilities: durations, timestamps and SI numbers."""

from .datetime import format_duration, parse_duration
from .humanize import HumanizedValue, format_value, humanize_number_si

__all__ = [
    'format_duration',
    'parse_duration',
    'HumanizedValue',
    'format_value',
    'humanize_number_si',
]
