"""
Resumen legible (markdown) de un AnalysisResult.
"""

from .models import AnalysisResult, PredictionType, Priority
from .stats import round_half_up


PREDICTION_ICONS = {
    PredictionType.FAILURE: "🔴",
    PredictionType.MAINTENANCE: "🟡",
    PredictionType.ANOMALY: "🟠",
}

PRIORITY_ICONS = {
    Priority.CRITICAL: "🚨",
    Priority.HIGH: "⚠️",
    Priority.MEDIUM: "📋",
    Priority.LOW: "💡",
}


def generate_analysis_summary(result: AnalysisResult, limit: int = 3) -> str:
    """
    Genera el texto resumen con los hallazgos y recomendaciones principales.

    Args:
        result: Resultado del análisis
        limit: Máximo de predicciones y de recomendaciones a listar
    """
    summary = (
        f"{result.status.emoji} **Device Health: {result.health_score}%** "
        f"({result.status.value.upper()})\n\n"
    )

    if result.predictions:
        summary += "**Key Findings:**\n"
        for pred in result.predictions[:limit]:
            confidence = int(round_half_up(pred.probability * 100))
            summary += (
                f"{PREDICTION_ICONS[pred.type]} {pred.description} "
                f"({confidence}% confidence, {pred.timeframe})\n"
            )
        summary += "\n"

    if result.recommendations:
        summary += "**Recommendations:**\n"
        for rec in result.recommendations[:limit]:
            summary += f"{PRIORITY_ICONS[rec.priority]} **{rec.title}**: {rec.action}\n"

    return summary
