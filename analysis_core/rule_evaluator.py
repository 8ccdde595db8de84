"""
Evaluador de Reglas para Analysis Core.
Evalúa reglas de umbral definidas por el usuario contra una lectura
individual y renderiza su plantilla de mensaje.

Sin estado: cada evaluación es una función pura de (regla, valor, contexto).
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import AlertRule, RuleEvaluation
from .stats import format_number
from .thresholds import compare


logger = logging.getLogger("analysis_core.rule_evaluator")


DEFAULT_MESSAGE_TEMPLATE = "{variable} value is {value}"


@dataclass(frozen=True)
class RuleContext:
    """
    Textos provistos por el llamador para renderizar plantillas.

    `value` y `threshold` son opcionales: si faltan se usan el valor
    observado y threshold1 formateados.
    """
    device: str = ""
    variable: str = ""
    value: Optional[str] = None
    threshold: Optional[str] = None


def render_template(
    template: str,
    rule: AlertRule,
    value: float,
    context: Optional[RuleContext] = None
) -> str:
    """
    Sustituye los tokens literales {value}, {threshold}, {device} y {variable}.

    {threshold} siempre es threshold1. Los tokens desconocidos quedan tal cual.
    """
    context = context or RuleContext()
    replacements = {
        "{value}": context.value if context.value is not None else format_number(value),
        "{threshold}": context.threshold if context.threshold is not None else format_number(rule.threshold1),
        "{device}": context.device,
        "{variable}": context.variable or rule.variable_code,
    }
    rendered = template
    for token, text in replacements.items():
        rendered = rendered.replace(token, text)
    return rendered


def render_default_message(
    rule: AlertRule,
    value: float,
    context: Optional[RuleContext] = None
) -> str:
    """Mensaje de respaldo cuando la regla no trae plantilla."""
    return render_template(DEFAULT_MESSAGE_TEMPLATE, rule, value, context)


def evaluate_rule(
    rule: AlertRule,
    value: float,
    context: Optional[RuleContext] = None
) -> RuleEvaluation:
    """
    Evalúa una regla contra un valor observado.

    - Reglas inactivas nunca se disparan.
    - `between`/`outside` sin threshold2 fallan cerrado (triggered=False)
      sin lanzar excepción.
    - Si se dispara y hay plantilla, se renderiza; sin plantilla no hay
      mensaje (el llamador usa render_default_message).

    Returns:
        RuleEvaluation con la severidad de la regla cuando se dispara
    """
    if not rule.is_active:
        return RuleEvaluation(triggered=False)

    if rule.operator.needs_second_threshold and rule.threshold2 is None:
        logger.debug(
            "Rule %r (%s) has no threshold2, failing closed",
            rule.name or rule.variable_code, rule.operator.value
        )
        return RuleEvaluation(triggered=False)

    if not compare(rule.operator, value, rule.threshold1, rule.threshold2):
        return RuleEvaluation(triggered=False)

    message = None
    if rule.message_template:
        message = render_template(rule.message_template, rule, value, context)

    return RuleEvaluation(triggered=True, rendered_message=message, severity=rule.severity)


def evaluate_rules(
    rules: Sequence[AlertRule],
    variable_code: str,
    value: float,
    context: Optional[RuleContext] = None
) -> List[Tuple[AlertRule, RuleEvaluation]]:
    """
    Evalúa todas las reglas activas de una variable, en el orden recibido.

    Returns:
        Pares (regla, evaluación) para cada regla aplicable, disparada o no
    """
    results = []
    for rule in rules:
        if not rule.is_active or rule.variable_code != variable_code:
            continue
        results.append((rule, evaluate_rule(rule, value, context)))
    return results
