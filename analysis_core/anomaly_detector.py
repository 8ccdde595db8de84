"""
Detector de Anomalías para Analysis Core.
Marca lecturas fuera del rango configurado o estadísticamente inusuales.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .models import Anomaly, DeviceConfig, TelemetryPoint
from .config import AnalysisPolicy, policy as default_policy
from .stats import format_number, mean, population_std_dev, round_half_up
from .thresholds import above_maximum, below_minimum
from .trend_analyzer import group_series


logger = logging.getLogger("analysis_core.anomaly_detector")


def detect_anomalies(
    telemetry: Sequence[TelemetryPoint],
    config: DeviceConfig,
    policy: Optional[AnalysisPolicy] = None
) -> List[Anomaly]:
    """
    Evalúa cada variable configurada contra su última lectura.

    Por variable se emiten, en este orden y sin exclusión mutua:
    debajo del mínimo, encima del máximo y atípico estadístico
    (más de N desviaciones respecto de la media de la propia ventana).
    Variables configuradas sin telemetría se omiten.

    Returns:
        Lista de Anomaly en orden estable (orden de variables de la config)
    """
    anomaly_policy = (policy or default_policy).anomaly
    series = group_series(telemetry)

    anomalies = []
    for variable in config.variables:
        points = series.get(variable.code)
        if not points:
            continue

        values = [p.value for p in points]
        window_mean = mean(values)
        std_dev = population_std_dev(values)
        latest = values[-1]

        if below_minimum(latest, variable.min_value):
            anomalies.append(Anomaly(
                variable_code=variable.code,
                severity=anomaly_policy.range_breach_severity,
                description=(
                    f"{variable.label} is below minimum threshold "
                    f"({format_number(latest)} < {format_number(variable.min_value)})"
                )
            ))

        if above_maximum(latest, variable.max_value):
            anomalies.append(Anomaly(
                variable_code=variable.code,
                severity=anomaly_policy.range_breach_severity,
                description=(
                    f"{variable.label} is above maximum threshold "
                    f"({format_number(latest)} > {format_number(variable.max_value)})"
                )
            ))

        if abs(latest - window_mean) > anomaly_policy.outlier_std_devs * std_dev:
            anomalies.append(Anomaly(
                variable_code=variable.code,
                severity=anomaly_policy.statistical_severity,
                description=(
                    f"{variable.label} shows unusual reading "
                    f"({latest:.2f}, expected ~{window_mean:.2f})"
                )
            ))

    logger.debug("Detected %d anomalies across %d variables", len(anomalies), len(config.variables))
    return anomalies


# ═══════════════════════════════════════════════════════════════════════════════
# Detección puntual (z-score) de una lectura contra su historial
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PointAnomaly:
    """Resultado de evaluar una lectura individual contra su historial."""
    is_anomaly: bool
    score: int  # 0-100, mayor = más anómalo
    kind: str  # spike | drop | trend | normal
    message: str
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_anomaly": self.is_anomaly,
            "score": self.score,
            "kind": self.kind,
            "message": self.message,
            "recommendation": self.recommendation
        }


MIN_HISTORY = 5
TREND_HISTORY = 10
TREND_SHIFT = 0.2

RECOMMENDATIONS = {
    "spike": "Check for sensor malfunction or environmental changes",
    "drop": "Verify device connectivity and sensor calibration",
    "trend": "Monitor closely for continued trend changes"
}


def detect_point_anomaly(
    current_value: float,
    historical_values: Sequence[float],
    threshold: float = 2.5
) -> PointAnomaly:
    """
    Evalúa una lectura nueva contra los valores históricos usando z-score.

    Args:
        current_value: Lectura a evaluar
        historical_values: Lecturas previas en orden cronológico
        threshold: Número de desviaciones que define un pico/caída

    Returns:
        PointAnomaly (nunca lanza excepciones por datos insuficientes)
    """
    if len(historical_values) < MIN_HISTORY:
        return PointAnomaly(False, 0, "normal", "Insufficient data for anomaly detection")

    baseline = mean(historical_values)
    std_dev = population_std_dev(historical_values)

    if std_dev == 0:
        if current_value != baseline:
            return PointAnomaly(True, 100, "spike", "Value deviates from constant baseline")
        return PointAnomaly(False, 0, "normal", "Normal")

    z_score = abs((current_value - baseline) / std_dev)
    score = int(min(100, round_half_up(z_score / threshold * 50)))

    if z_score > threshold:
        kind = "spike" if current_value > baseline else "drop"
        return PointAnomaly(
            True,
            score,
            kind,
            f"Unusual {kind} detected: {current_value:.2f} (expected ~{baseline:.2f})",
            RECOMMENDATIONS[kind]
        )

    if len(historical_values) >= TREND_HISTORY:
        recent_mean = mean(historical_values[-5:])
        older_mean = mean(historical_values[-10:-5])
        if older_mean != 0:
            shift = abs(recent_mean - older_mean) / older_mean
            if shift > TREND_SHIFT:
                return PointAnomaly(
                    True,
                    int(round_half_up(shift * 100)),
                    "trend",
                    f"Significant trend change detected: {shift * 100:.1f}% shift",
                    RECOMMENDATIONS["trend"]
                )

    return PointAnomaly(False, score, "normal", "Value within normal range")
