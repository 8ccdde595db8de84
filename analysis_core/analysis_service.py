"""
Servicio principal de Analysis Core.
Orquesta el análisis de una ventana de telemetría y la evaluación de reglas.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import (
    AlertRule,
    AnalysisResult,
    DeviceConfig,
    RuleEvaluation,
    TelemetryPoint,
)
from .config import AnalysisPolicy, policy as default_policy
from .trend_analyzer import calculate_trends
from .anomaly_detector import detect_anomalies
from .predictor import generate_predictions
from .recommendations import generate_recommendations
from .health_scorer import calculate_health_score, status_for_score
from .rule_evaluator import RuleContext, evaluate_rules


logger = logging.getLogger("analysis_core.analysis_service")


def analyze_device_telemetry(
    telemetry: Sequence[TelemetryPoint],
    config: DeviceConfig,
    period: Optional[str] = None,
    policy: Optional[AnalysisPolicy] = None,
    device_id: str = "",
    device_name: str = ""
) -> AnalysisResult:
    """
    Ejecuta el pipeline completo de análisis.

    Flujo:
    1. Tendencias por variable
    2. Anomalías por variable configurada
    3. Predicciones (tendencias + anomalías + heurísticas de categoría)
    4. Recomendaciones priorizadas
    5. Puntaje de salud y estado

    Función pura: mismas entradas producen el mismo resultado.
    """
    policy = policy or default_policy

    trends = calculate_trends(telemetry, config, period=period, policy=policy)
    anomalies = detect_anomalies(telemetry, config, policy=policy)
    predictions = generate_predictions(telemetry, trends, anomalies, config, policy=policy)
    recommendations = generate_recommendations(predictions, trends, config, policy=policy)
    health_score = calculate_health_score(predictions, anomalies, trends, policy=policy)
    status = status_for_score(health_score, policy)

    logger.info(
        "Analyzed %s: %d points, score=%d, status=%s",
        device_id or "device", len(telemetry), health_score, status.value
    )

    return AnalysisResult(
        health_score=health_score,
        status=status,
        predictions=tuple(predictions),
        recommendations=tuple(recommendations),
        trends=tuple(trends),
        anomalies=tuple(anomalies),
        device_id=device_id,
        device_name=device_name
    )


@dataclass(frozen=True)
class AnalysisRequest:
    """Entrada de un análisis dentro de un lote."""
    telemetry: Sequence[TelemetryPoint]
    config: DeviceConfig
    device_id: str = ""
    device_name: str = ""
    period: Optional[str] = None


class AnalysisService:
    """
    🧠 Analysis Service - Orquestador del núcleo de análisis.

    No guarda estado entre llamadas más allá de la política configurada,
    por lo que una misma instancia puede usarse desde varios hilos.

    Ejemplo:
        service = AnalysisService()
        result = service.analyze(telemetry, config, device_id="42")
        print(result.health_score, result.status.value)
    """

    def __init__(self, policy: Optional[AnalysisPolicy] = None, max_workers: Optional[int] = None):
        self.policy = policy or default_policy
        self.max_workers = max_workers

    def analyze(
        self,
        telemetry: Sequence[TelemetryPoint],
        config: DeviceConfig,
        device_id: str = "",
        device_name: str = "",
        period: Optional[str] = None
    ) -> AnalysisResult:
        """Analiza la ventana de telemetría de un dispositivo."""
        return analyze_device_telemetry(
            telemetry,
            config,
            period=period,
            policy=self.policy,
            device_id=device_id,
            device_name=device_name
        )

    def analyze_batch(self, requests: Sequence[AnalysisRequest]) -> List[AnalysisResult]:
        """
        Analiza varios dispositivos en paralelo.

        Cada análisis es independiente; los resultados se devuelven en el
        mismo orden que las solicitudes.
        """
        if not requests:
            return []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(
                lambda req: self.analyze(
                    req.telemetry,
                    req.config,
                    device_id=req.device_id,
                    device_name=req.device_name,
                    period=req.period
                ),
                requests
            ))

    def evaluate_reading(
        self,
        rules: Sequence[AlertRule],
        variable_code: str,
        value: float,
        context: Optional[RuleContext] = None
    ) -> List[Tuple[AlertRule, RuleEvaluation]]:
        """
        Evalúa las reglas aplicables a una lectura.

        Returns:
            Solo los pares cuya evaluación se disparó
        """
        return [
            (rule, evaluation)
            for rule, evaluation in evaluate_rules(rules, variable_code, value, context)
            if evaluation.triggered
        ]
