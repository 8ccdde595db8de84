"""
Predictor para Analysis Core.
Combina tendencias, anomalías y heurísticas por categoría en
predicciones fechadas y probabilísticas.
"""

import logging
import math
from typing import List, Optional, Sequence

from .models import (
    Anomaly,
    DeviceCategory,
    DeviceConfig,
    Prediction,
    PredictionType,
    TelemetryPoint,
    Trend,
    TrendDirection,
)
from .config import AnalysisPolicy, PredictionPolicy, policy as default_policy
from .stats import mean
from .trend_analyzer import group_series


logger = logging.getLogger("analysis_core.predictor")


def _clamp_probability(value: float) -> float:
    return max(0.0, min(1.0, value))


def estimate_days_to_max(
    change_percent: float,
    latest_value: float,
    max_value: float,
    window_days: float = 7.0
) -> Optional[float]:
    """
    Proyecta linealmente los días hasta superar el máximo.

    Returns:
        Días hasta el máximo, o None si la tasa diaria no es positiva
    """
    rate_of_change = (change_percent / 100) * latest_value / window_days
    if rate_of_change <= 0:
        return None
    return (max_value - latest_value) / rate_of_change


def _trend_predictions(
    trend: Trend,
    telemetry_series: dict,
    config: DeviceConfig,
    rules: PredictionPolicy
) -> List[Prediction]:
    variable = config.get_variable(trend.variable_code)
    if variable is None:
        # Sin definición no hay etiqueta ni máximo contra el cual proyectar
        return []

    predictions = []

    if (trend.direction is TrendDirection.DECREASING
            and trend.change_percent < rules.rapid_decline_percent
            and config.category is DeviceCategory.WATER):
        predictions.append(Prediction(
            type=PredictionType.ANOMALY,
            probability=rules.rapid_decline_probability,
            timeframe=rules.rapid_decline_timeframe,
            description=f"{variable.label} showing rapid decline - possible leak or sensor issue",
            variable_code=trend.variable_code
        ))

    if trend.direction is TrendDirection.VOLATILE:
        predictions.append(Prediction(
            type=PredictionType.MAINTENANCE,
            probability=rules.calibration_probability,
            timeframe=rules.calibration_timeframe,
            description=f"{variable.label} readings are unstable - sensor calibration may be needed",
            variable_code=trend.variable_code
        ))

    if trend.direction is TrendDirection.INCREASING and variable.max_value is not None:
        points = telemetry_series.get(trend.variable_code, [])
        latest_value = points[-1].value if points else 0.0
        days_to_max = estimate_days_to_max(
            trend.change_percent, latest_value, variable.max_value, rules.breach_window_days
        )
        if days_to_max is not None and 0 < days_to_max < rules.breach_horizon_days:
            probability = rules.breach_base_probability + (
                1 - days_to_max / rules.breach_horizon_days
            ) * rules.breach_probability_span
            predictions.append(Prediction(
                type=PredictionType.FAILURE,
                probability=_clamp_probability(probability),
                timeframe=f"{math.ceil(days_to_max)} days",
                description=f"{variable.label} may exceed maximum threshold",
                variable_code=trend.variable_code
            ))

    return predictions


def _category_predictions(
    telemetry_series: dict,
    config: DeviceConfig,
    rules: PredictionPolicy
) -> List[Prediction]:
    predictions = []

    if config.category is DeviceCategory.WATER:
        levels = [
            p.value
            for code in rules.water_level_codes
            for p in telemetry_series.get(code, [])
        ]
        if levels and mean(levels) < rules.water_level_critical:
            predictions.append(Prediction(
                type=PredictionType.MAINTENANCE,
                probability=rules.refill_probability,
                timeframe=rules.refill_timeframe,
                description="Water level critically low - refill required soon"
            ))

    if config.category is DeviceCategory.POWER:
        voltages = [p.value for p in telemetry_series.get(rules.voltage_code, [])]
        if voltages:
            avg_voltage = mean(voltages)
            if avg_voltage < rules.voltage_min or avg_voltage > rules.voltage_max:
                predictions.append(Prediction(
                    type=PredictionType.ANOMALY,
                    probability=rules.voltage_probability,
                    timeframe=rules.voltage_timeframe,
                    description="Voltage fluctuations detected - check power supply stability"
                ))

    return predictions


def generate_predictions(
    telemetry: Sequence[TelemetryPoint],
    trends: Sequence[Trend],
    anomalies: Sequence[Anomaly],
    config: DeviceConfig,
    policy: Optional[AnalysisPolicy] = None
) -> List[Prediction]:
    """
    Genera predicciones a partir de tendencias, anomalías y la categoría.

    Orden de generación: reglas por tendencia, anomalías severas como
    fallo inmediato y por último heurísticas absolutas de categoría.

    Returns:
        Lista ordenada por probabilidad descendente (orden estable en empates)
    """
    rules = (policy or default_policy).prediction
    series = group_series(telemetry)

    predictions: List[Prediction] = []
    for trend in trends:
        predictions.extend(_trend_predictions(trend, series, config, rules))

    for anomaly in anomalies:
        if anomaly.severity > rules.immediate_failure_severity:
            predictions.append(Prediction(
                type=PredictionType.FAILURE,
                probability=_clamp_probability(anomaly.severity),
                timeframe="immediate",
                description=anomaly.description,
                variable_code=anomaly.variable_code
            ))

    predictions.extend(_category_predictions(series, config, rules))

    logger.debug("Generated %d predictions (%s)", len(predictions), config.category.value)
    return sorted(predictions, key=lambda p: -p.probability)
