"""
Analizador de Tendencias para Analysis Core.
Calcula dirección y volatilidad de cada variable dentro de una ventana.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from .models import DeviceConfig, TelemetryPoint, Trend, TrendDirection
from .config import AnalysisPolicy, policy as default_policy
from .stats import mean, population_std_dev, round_half_up


logger = logging.getLogger("analysis_core.trend_analyzer")


def chronological_key(point: TelemetryPoint) -> datetime:
    """Timestamps sin zona horaria se interpretan como UTC."""
    if point.captured_at.tzinfo is None:
        return point.captured_at.replace(tzinfo=timezone.utc)
    return point.captured_at


def group_series(telemetry: Sequence[TelemetryPoint]) -> Dict[str, List[TelemetryPoint]]:
    """
    Agrupa la ventana por variable, cada serie ordenada por `captured_at`.

    El orden de las claves es el de primera aparición en la ventana.
    El ordenamiento es estable: puntos con igual timestamp conservan su orden.
    Ventanas que mezclan timestamps con y sin zona horaria se ordenan
    interpretando los timestamps sin zona como UTC.
    """
    series: Dict[str, List[TelemetryPoint]] = {}
    for point in telemetry:
        series.setdefault(point.variable_code, []).append(point)
    return {
        code: sorted(points, key=chronological_key)
        for code, points in series.items()
    }


def classify(
    change_percent: float,
    coefficient_of_variation: float,
    policy: Optional[AnalysisPolicy] = None
) -> TrendDirection:
    """Clasifica la tendencia; la primera condición que se cumple gana."""
    trend_policy = (policy or default_policy).trend
    if coefficient_of_variation > trend_policy.volatile_cv_percent:
        return TrendDirection.VOLATILE
    if abs(change_percent) < trend_policy.stable_change_percent:
        return TrendDirection.STABLE
    if change_percent > 0:
        return TrendDirection.INCREASING
    return TrendDirection.DECREASING


def analyze_series(
    variable_code: str,
    values: Sequence[float],
    period: str,
    policy: Optional[AnalysisPolicy] = None
) -> Optional[Trend]:
    """
    Calcula la tendencia de una serie ya ordenada.

    La serie se divide en floor(n/2): con n impar el punto central
    pertenece a la segunda mitad.

    Returns:
        Trend, o None si hay menos de 2 valores
    """
    n = len(values)
    if n < 2:
        return None

    split = n // 2
    first_avg = mean(values[:split])
    second_avg = mean(values[split:])
    change_percent = 0.0 if first_avg == 0 else (second_avg - first_avg) / first_avg * 100

    # Volatilidad sobre la ventana completa
    window_mean = mean(values)
    std_dev = population_std_dev(values)
    coefficient_of_variation = 0.0 if window_mean == 0 else std_dev / window_mean * 100

    direction = classify(change_percent, coefficient_of_variation, policy)
    logger.debug(
        "%s: first_avg=%.3f second_avg=%.3f cv=%.2f -> %s",
        variable_code, first_avg, second_avg, coefficient_of_variation, direction.value
    )

    return Trend(
        variable_code=variable_code,
        direction=direction,
        change_percent=round_half_up(change_percent, 1),
        period=period
    )


def calculate_trends(
    telemetry: Sequence[TelemetryPoint],
    config: Optional[DeviceConfig] = None,
    period: Optional[str] = None,
    policy: Optional[AnalysisPolicy] = None
) -> List[Trend]:
    """
    Emite una tendencia por cada variable presente con al menos 2 puntos.

    Args:
        telemetry: Ventana de telemetría (posiblemente con variables intercaladas)
        config: Configuración del dispositivo (no filtra variables; se acepta
            por simetría con el resto de analizadores)
        period: Etiqueta descriptiva del período (no es una duración calculada)
        policy: Tabla de políticas; por defecto la global

    Returns:
        Lista de Trend en orden de primera aparición de cada variable
    """
    policy = policy or default_policy
    label = period if period is not None else policy.trend.default_period

    trends = []
    for code, points in group_series(telemetry).items():
        trend = analyze_series(code, [p.value for p in points], label, policy)
        if trend is None:
            logger.debug("%s: fewer than 2 points, trend skipped", code)
            continue
        trends.append(trend)
    return trends
