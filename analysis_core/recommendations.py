"""
Sintetizador de Recomendaciones para Analysis Core.
Convierte predicciones y tendencias en acciones priorizadas.
"""

import logging
from typing import List, Optional, Sequence

from .models import (
    DeviceCategory,
    DeviceConfig,
    Prediction,
    PredictionType,
    Priority,
    Recommendation,
    Trend,
    TrendDirection,
)
from .config import AnalysisPolicy, policy as default_policy
from .stats import format_number


logger = logging.getLogger("analysis_core.recommendations")


BUSINESS_AS_USUAL = Recommendation(
    priority=Priority.LOW,
    title="Regular Maintenance Schedule",
    description="Device is operating normally",
    action="Continue regular monitoring and scheduled maintenance",
    estimated_impact="Maintain optimal device performance"
)


def _find_trend(trends: Sequence[Trend], codes) -> Optional[Trend]:
    for trend in trends:
        if trend.variable_code in codes:
            return trend
    return None


def generate_recommendations(
    predictions: Sequence[Prediction],
    trends: Sequence[Trend],
    config: DeviceConfig,
    policy: Optional[AnalysisPolicy] = None
) -> List[Recommendation]:
    """
    Sintetiza recomendaciones accionables.

    - Fallo con probabilidad alta -> CRITICAL
    - Mantenimiento (cualquier probabilidad) -> MEDIUM
    - Agua con nivel en descenso -> LOW
    - Energía (KWH) en aumento marcado -> MEDIUM
    - Sin ninguna CRITICAL -> una LOW de "operación normal" al final

    Returns:
        Lista ordenada por prioridad (critical < high < medium < low), estable
    """
    policy = policy or default_policy
    rec_policy = policy.recommendation
    recommendations: List[Recommendation] = []

    for pred in predictions:
        if pred.type is PredictionType.FAILURE and pred.probability > rec_policy.critical_failure_probability:
            recommendations.append(Recommendation(
                priority=Priority.CRITICAL,
                title="Immediate Attention Required",
                description=pred.description,
                action="Schedule immediate inspection and maintenance",
                estimated_impact="Prevent potential device failure and data loss"
            ))

    for pred in predictions:
        if pred.type is PredictionType.MAINTENANCE:
            recommendations.append(Recommendation(
                priority=Priority.MEDIUM,
                title="Scheduled Maintenance Recommended",
                description=pred.description,
                action=f"Plan maintenance within {pred.timeframe}",
                estimated_impact="Extend device lifespan and improve accuracy"
            ))

    if config.category is DeviceCategory.WATER:
        water_trend = _find_trend(trends, policy.prediction.water_level_codes)
        if water_trend is not None and water_trend.direction is TrendDirection.DECREASING:
            recommendations.append(Recommendation(
                priority=Priority.LOW,
                title="Monitor Water Consumption",
                description="Water level is trending downward",
                action="Review consumption patterns and check for leaks",
                estimated_impact="Optimize water usage and reduce costs"
            ))

    if config.category is DeviceCategory.POWER:
        energy_trend = _find_trend(trends, (rec_policy.energy_code,))
        if (energy_trend is not None
                and energy_trend.direction is TrendDirection.INCREASING
                and energy_trend.change_percent > rec_policy.energy_increase_percent):
            recommendations.append(Recommendation(
                priority=Priority.MEDIUM,
                title="Energy Consumption Increasing",
                description=f"Energy usage up {format_number(energy_trend.change_percent)}% over the period",
                action="Audit connected equipment for efficiency issues",
                estimated_impact="Potential 10-20% reduction in energy costs"
            ))

    if not any(r.priority is Priority.CRITICAL for r in recommendations):
        recommendations.append(BUSINESS_AS_USUAL)

    logger.debug("Synthesized %d recommendations", len(recommendations))
    return sorted(recommendations, key=lambda r: r.priority.rank)
