"""
Configuración centralizada para Analysis Core.
Tabla de políticas: cada constante de las heurísticas es un campo
configurable cuyo valor por defecto reproduce el comportamiento histórico.

Las constantes (0.7, 0.8, 0.6, 0.5 + …, 2 desviaciones) son valores
ajustados a mano, no derivados estadísticamente.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Any, Tuple


@dataclass(frozen=True)
class TrendPolicy:
    """Parámetros del analizador de tendencias."""
    volatile_cv_percent: float = 30.0  # Coeficiente de variación para "volatile"
    stable_change_percent: float = 5.0  # |cambio| por debajo = "stable"
    default_period: str = "last 7 days"


@dataclass(frozen=True)
class AnomalyPolicy:
    """Parámetros del detector de anomalías."""
    range_breach_severity: float = 0.8
    statistical_severity: float = 0.6
    outlier_std_devs: float = 2.0


@dataclass(frozen=True)
class PredictionPolicy:
    """Parámetros del predictor."""
    # Caída rápida en dispositivos de agua
    rapid_decline_percent: float = -20.0
    rapid_decline_probability: float = 0.7
    rapid_decline_timeframe: str = "1-2 weeks"
    # Lecturas volátiles
    calibration_probability: float = 0.6
    calibration_timeframe: str = "2-4 weeks"
    # Proyección de ruptura del máximo
    breach_window_days: float = 7.0
    breach_horizon_days: float = 30.0
    breach_base_probability: float = 0.5
    breach_probability_span: float = 0.3
    # Anomalías que se convierten en fallo inmediato
    immediate_failure_severity: float = 0.7
    # Heurísticas por categoría
    water_level_codes: Tuple[str, ...] = ("W", "WL")
    water_level_critical: float = 20.0
    refill_probability: float = 0.8
    refill_timeframe: str = "1-3 days"
    voltage_code: str = "V"
    voltage_min: float = 210.0
    voltage_max: float = 245.0
    voltage_probability: float = 0.7
    voltage_timeframe: str = "ongoing"


@dataclass(frozen=True)
class RecommendationPolicy:
    """Parámetros del sintetizador de recomendaciones."""
    critical_failure_probability: float = 0.6
    energy_code: str = "KWH"
    energy_increase_percent: float = 15.0


@dataclass(frozen=True)
class HealthPolicy:
    """Pesos del puntaje de salud y límites de estado."""
    failure_weight: float = 30.0
    maintenance_weight: float = 15.0
    anomaly_prediction_weight: float = 20.0
    anomaly_severity_weight: float = 10.0
    volatile_penalty: float = 5.0
    healthy_min: float = 80.0
    warning_min: float = 50.0


_SECTIONS = {
    "trend": TrendPolicy,
    "anomaly": AnomalyPolicy,
    "prediction": PredictionPolicy,
    "recommendation": RecommendationPolicy,
    "health": HealthPolicy,
}


@dataclass(frozen=True)
class AnalysisPolicy:
    """Configuración completa del Analysis Core."""
    trend: TrendPolicy = field(default_factory=TrendPolicy)
    anomaly: AnomalyPolicy = field(default_factory=AnomalyPolicy)
    prediction: PredictionPolicy = field(default_factory=PredictionPolicy)
    recommendation: RecommendationPolicy = field(default_factory=RecommendationPolicy)
    health: HealthPolicy = field(default_factory=HealthPolicy)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisPolicy":
        """
        Crea una política a partir de un diccionario parcial.

        Solo se sobrescriben los campos presentes; el resto mantiene
        los valores por defecto.

        Example:
            >>> AnalysisPolicy.from_dict({"health": {"healthy_min": 90}})

        Raises:
            ValueError: Si una sección o campo no existe
        """
        sections = {}
        for name, overrides in (data or {}).items():
            if name not in _SECTIONS:
                raise ValueError(f"Unknown policy section: {name}")
            section_cls = _SECTIONS[name]
            known = {f.name for f in fields(section_cls)}
            unknown = set(overrides) - known
            if unknown:
                raise ValueError(
                    f"Unknown fields for policy section '{name}': {', '.join(sorted(unknown))}"
                )
            values = dict(overrides)
            if "water_level_codes" in values:
                values["water_level_codes"] = tuple(values["water_level_codes"])
            sections[name] = replace(section_cls(), **values)
        return cls(**sections)


# Instancia global de política (puede ser sobrescrita por parámetro)
policy = AnalysisPolicy()
