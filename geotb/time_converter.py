"""
Conversão entre tempo simulado (ticks) e dias.

Granularidade: 1 tick = 1 hora simulada.
"""

from .config import ModelParameters

TICKS_PER_DAY = ModelParameters.HOURS_IN_DAY


def days_to_ticks(days: float) -> float:
    """Converte dias em ticks."""
    return days * TICKS_PER_DAY


def ticks_to_days(ticks: float) -> float:
    """Converte ticks em dias."""
    return ticks / TICKS_PER_DAY
