"""
Comparaciones de umbral compartidas.

Única implementación de la lógica "¿este número está mal?": la usan tanto
el detector de anomalías (chequeos de rango) como el evaluador de reglas,
y cualquier consumidor externo (p. ej. insignias de rango en la UI).
"""

from typing import Optional

from .models import RuleOperator


def compare(
    operator: RuleOperator,
    value: float,
    threshold1: float,
    threshold2: Optional[float] = None
) -> bool:
    """
    Evalúa `value` contra los umbrales según el operador.

    `eq`/`neq` usan comparación exacta de flotantes, sin épsilon: respeta
    literalmente el umbral escrito por el autor de la regla.

    `between` y `outside` sin `threshold2` retornan False (fail-closed).
    Un rango invertido (threshold2 < threshold1) se evalúa literalmente.

    Returns:
        True si la condición se cumple
    """
    if operator is RuleOperator.LT:
        return value < threshold1
    if operator is RuleOperator.LTE:
        return value <= threshold1
    if operator is RuleOperator.EQ:
        return value == threshold1
    if operator is RuleOperator.NEQ:
        return value != threshold1
    if operator is RuleOperator.GTE:
        return value >= threshold1
    if operator is RuleOperator.GT:
        return value > threshold1

    if threshold2 is None:
        return False
    if operator is RuleOperator.BETWEEN:
        return threshold1 <= value <= threshold2
    if operator is RuleOperator.OUTSIDE:
        return value < threshold1 or value > threshold2
    return False


def below_minimum(value: float, min_value: Optional[float]) -> bool:
    """True si hay mínimo definido y el valor queda por debajo."""
    return min_value is not None and compare(RuleOperator.LT, value, min_value)


def above_maximum(value: float, max_value: Optional[float]) -> bool:
    """True si hay máximo definido y el valor queda por encima."""
    return max_value is not None and compare(RuleOperator.GT, value, max_value)


def in_range(value: float, min_value: Optional[float], max_value: Optional[float]) -> bool:
    """True si el valor respeta ambos límites definidos."""
    return not below_minimum(value, min_value) and not above_maximum(value, max_value)
