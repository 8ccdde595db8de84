"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                    🧠 Analysis Core - Device Telemetry 🧠                     ║
║              Trend, Anomaly, Prediction & Alert Rule Evaluation              ║
╚══════════════════════════════════════════════════════════════════════════════╝

Capa de análisis puro para telemetría de dispositivos IoT.
Recibe una ventana de lecturas y la configuración del dispositivo, y produce
tendencias, anomalías, predicciones, recomendaciones y un puntaje de salud.
También evalúa reglas de alerta de umbral contra lecturas individuales.

No hace I/O ni guarda estado entre llamadas.

Módulos:
- models: Dataclasses para datos de entrada/salida
- config: Tabla de políticas (umbrales y probabilidades)
- thresholds: Comparaciones de umbral compartidas
- trend_analyzer, anomaly_detector, predictor: Análisis de la ventana
- recommendations, health_scorer, summary: Síntesis del resultado
- rule_evaluator: Evaluación de reglas de alerta
- analysis_service: Orquestador principal
"""

from .models import (
    TelemetryPoint,
    VariableDefinition,
    DeviceConfig,
    DeviceCategory,
    Trend,
    TrendDirection,
    Anomaly,
    Prediction,
    PredictionType,
    Recommendation,
    Priority,
    AnalysisResult,
    HealthStatus,
    AlertRule,
    RuleOperator,
    RuleSeverity,
    RuleEvaluation,
    InvalidInputError,
)
from .config import AnalysisPolicy
from .rule_evaluator import RuleContext, evaluate_rule, evaluate_rules
from .health_scorer import status_for_score
from .summary import generate_analysis_summary
from .analysis_service import AnalysisService, AnalysisRequest, analyze_device_telemetry

__all__ = [
    "TelemetryPoint",
    "VariableDefinition",
    "DeviceConfig",
    "DeviceCategory",
    "Trend",
    "TrendDirection",
    "Anomaly",
    "Prediction",
    "PredictionType",
    "Recommendation",
    "Priority",
    "AnalysisResult",
    "HealthStatus",
    "AlertRule",
    "RuleOperator",
    "RuleSeverity",
    "RuleEvaluation",
    "InvalidInputError",
    "AnalysisPolicy",
    "RuleContext",
    "evaluate_rule",
    "evaluate_rules",
    "status_for_score",
    "generate_analysis_summary",
    "AnalysisService",
    "AnalysisRequest",
    "analyze_device_telemetry",
]

__version__ = "1.0.0"
