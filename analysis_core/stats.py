"""
Utilidades numéricas compartidas por los analizadores.
"""

import math
from typing import Sequence


def mean(values: Sequence[float]) -> float:
    """Media aritmética; 0.0 para secuencias vacías."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std_dev(values: Sequence[float]) -> float:
    """Desviación estándar poblacional (divide por n, no por n-1)."""
    if not values:
        return 0.0
    avg = mean(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Redondea al más cercano con empates hacia +infinito.

    A diferencia de round(), no usa redondeo bancario: 0.5 -> 1, -0.5 -> 0.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float) -> str:
    """Formatea un número para descripciones: 5.0 -> "5", 5.25 -> "5.25"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
