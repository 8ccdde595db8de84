"""
Puntaje de Salud para Analysis Core.
Agrega predicciones, anomalías y tendencias en un puntaje 0-100
y un estado grueso (healthy / warning / critical).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .models import Anomaly, HealthStatus, Prediction, PredictionType, Trend, TrendDirection
from .config import AnalysisPolicy, policy as default_policy
from .stats import round_half_up


def status_for_score(score: float, policy: Optional[AnalysisPolicy] = None) -> HealthStatus:
    """
    Mapea un puntaje a estado.

    Es el único lugar donde viven los límites (>= 80 healthy, >= 50 warning);
    todo reporte de estado de salud debe pasar por aquí.
    """
    health = (policy or default_policy).health
    if score >= health.healthy_min:
        return HealthStatus.HEALTHY
    if score >= health.warning_min:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def calculate_health_score(
    predictions: Sequence[Prediction],
    anomalies: Sequence[Anomaly],
    trends: Sequence[Trend],
    policy: Optional[AnalysisPolicy] = None
) -> int:
    """
    Calcula el puntaje de salud partiendo de 100.

    El redondeo se hace una sola vez al final, no en cada descuento.

    Returns:
        Entero en [0, 100]
    """
    health = (policy or default_policy).health
    weights = {
        PredictionType.FAILURE: health.failure_weight,
        PredictionType.MAINTENANCE: health.maintenance_weight,
        PredictionType.ANOMALY: health.anomaly_prediction_weight,
    }

    score = 100.0
    for pred in predictions:
        score -= pred.probability * weights[pred.type]
    for anomaly in anomalies:
        score -= anomaly.severity * health.anomaly_severity_weight
    for trend in trends:
        if trend.direction is TrendDirection.VOLATILE:
            score -= health.volatile_penalty

    score = max(0.0, min(100.0, score))
    return int(round_half_up(score))


# ═══════════════════════════════════════════════════════════════════════════════
# Salud de conectividad (estado operativo del dispositivo)
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ConnectivityHealth:
    score: int
    status: HealthStatus
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status.value,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations)
        }


def calculate_connectivity_health(
    last_seen_at: Optional[datetime],
    device_status: str,
    recent_alerts: int,
    telemetry_gaps: int,
    anomaly_count: int,
    now: datetime,
    policy: Optional[AnalysisPolicy] = None
) -> ConnectivityHealth:
    """
    Puntúa el estado operativo de un dispositivo (conectividad, alertas, huecos).

    Args:
        last_seen_at: Última vez que el dispositivo reportó datos (None = nunca)
        device_status: Estado de suscripción ("active", "inactive", "suspended")
        recent_alerts: Alertas recientes del dispositivo
        telemetry_gaps: Huecos de transmisión detectados
        anomaly_count: Anomalías detectadas en el período
        now: Instante de referencia (se recibe explícito, sin reloj interno)
    """
    score = 100
    issues: List[str] = []
    recommendations: List[str] = []

    if last_seen_at is None:
        score -= 40
        issues.append("Device has never reported data")
        recommendations.append("Verify device installation and connectivity")
    else:
        hours = (now - last_seen_at).total_seconds() / 3600
        if hours > 168:
            score -= 35
            issues.append("Device offline for over a week")
            recommendations.append("Check device power and network connection")
        elif hours > 72:
            score -= 25
            issues.append("Device offline for over 3 days")
            recommendations.append("Verify device status on-site")
        elif hours > 24:
            score -= 15
            issues.append("Device offline for over 24 hours")
            recommendations.append("Monitor for connectivity issues")

    if device_status == "inactive":
        score -= 20
        issues.append("Device marked as inactive")
    elif device_status == "suspended":
        score -= 30
        issues.append("Device subscription suspended")
        recommendations.append("Check subscription payment status")

    if recent_alerts > 10:
        score -= 20
        issues.append(f"High alert frequency: {recent_alerts} alerts")
        recommendations.append("Review alert thresholds and device calibration")
    elif recent_alerts > 5:
        score -= 10
        issues.append(f"Elevated alerts: {recent_alerts} alerts")

    if telemetry_gaps > 5:
        score -= 15
        issues.append("Frequent data transmission gaps")
        recommendations.append("Check network stability and signal strength")

    if anomaly_count > 3:
        score -= 10
        issues.append(f"Multiple anomalies detected: {anomaly_count}")
        recommendations.append("Investigate sensor readings for accuracy")

    score = max(0, score)
    return ConnectivityHealth(
        score=score,
        status=status_for_score(score, policy),
        issues=issues,
        recommendations=recommendations
    )
