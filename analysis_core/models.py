"""
Modelos de datos para Analysis Core.
Define las estructuras de entrada (telemetría, configuración, reglas)
y los resultados derivados del análisis.

Todas las estructuras derivadas son valores puros: se recalculan en cada
llamada, no llevan identificadores propios y nunca se mutan en sitio.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class InvalidInputError(ValueError):
    """Excepción cuando un diccionario de entrada no puede convertirse a modelo."""
    pass


def _parse_enum(enum_cls, raw, field_name: str):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(
            f"Invalid {field_name}: {raw!r}. Must be one of: {allowed}"
        )


def _parse_timestamp(raw) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    raise InvalidInputError(f"Invalid captured_at: {raw!r}")


def _parse_float(raw, field_name: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid {field_name}: {raw!r} ({e})")


def _optional_float(raw, field_name: str) -> Optional[float]:
    return None if raw is None else _parse_float(raw, field_name)


def _parse_bool(raw, field_name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "1", "yes"):
        return True
    if isinstance(raw, str) and raw.strip().lower() in ("false", "0", "no"):
        return False
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    raise InvalidInputError(f"Invalid {field_name}: {raw!r}. Must be a boolean")


class DeviceCategory(Enum):
    """Categoría del tipo de dispositivo; selecciona las heurísticas."""
    WATER = "water"
    POWER = "power"
    ENVIRONMENT = "environment"
    INDUSTRIAL = "industrial"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "DeviceCategory":
        """Categorías desconocidas o vacías se tratan como OTHER."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw or "other").lower())
        except ValueError:
            return cls.OTHER


class TrendDirection(Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


class PredictionType(Enum):
    FAILURE = "failure"
    MAINTENANCE = "maintenance"
    ANOMALY = "anomaly"


class Priority(Enum):
    """Prioridad de una recomendación."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Retorna el orden de clasificación (menor = más urgente)."""
        ranks = {"critical": 0, "high": 1, "medium": 2, "low": 3}
        return ranks[self.value]


class HealthStatus(Enum):
    """Estado de salud agregado de un dispositivo."""
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def emoji(self) -> str:
        emojis = {
            "healthy": "✅",
            "warning": "⚠️",
            "critical": "🚨"
        }
        return emojis[self.value]


class RuleOperator(Enum):
    """Operadores soportados por las reglas de alerta."""
    LT = "lt"
    LTE = "lte"
    EQ = "eq"
    NEQ = "neq"
    GTE = "gte"
    GT = "gt"
    BETWEEN = "between"
    OUTSIDE = "outside"

    @property
    def needs_second_threshold(self) -> bool:
        return self in (RuleOperator.BETWEEN, RuleOperator.OUTSIDE)


class RuleSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


# ═══════════════════════════════════════════════════════════════════════════════
# Entradas
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TelemetryPoint:
    """
    Lectura individual de telemetría producida por la ingesta.

    Una ventana es una secuencia de puntos ordenada por `captured_at`,
    no necesariamente equiespaciada y con variables intercaladas.
    """
    variable_code: str
    value: float
    captured_at: datetime

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TelemetryPoint":
        """Crea una instancia desde un diccionario (payload de ingesta)."""
        try:
            code = data["variable_code"]
            value = float(data["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"Invalid telemetry point {data!r}: {e}")
        return cls(
            variable_code=code,
            value=value,
            captured_at=_parse_timestamp(data.get("captured_at"))
        )


@dataclass(frozen=True)
class VariableDefinition:
    """Define el rango válido/esperado de una variable medida."""
    code: str
    label: str
    unit: str = ""
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VariableDefinition":
        if not data.get("code"):
            raise InvalidInputError(f"Variable definition without code: {data!r}")
        return cls(
            code=data["code"],
            label=data.get("label") or data["code"],
            unit=data.get("unit") or "",
            min_value=_optional_float(data.get("min_value"), "min_value"),
            max_value=_optional_float(data.get("max_value"), "max_value")
        )


@dataclass(frozen=True)
class DeviceConfig:
    """
    Configuración de solo lectura de un dispositivo.

    Precondición: los códigos de `variables` son únicos. El núcleo no lo
    revalida; con códigos duplicados la salida es coherente pero sin sentido.
    """
    category: DeviceCategory = DeviceCategory.OTHER
    variables: tuple = ()

    def get_variable(self, code: str) -> Optional[VariableDefinition]:
        for variable in self.variables:
            if variable.code == code:
                return variable
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceConfig":
        return cls(
            category=DeviceCategory.parse(data.get("category")),
            variables=tuple(
                VariableDefinition.from_dict(v) for v in data.get("variables", [])
            )
        )


@dataclass(frozen=True)
class AlertRule:
    """
    Regla de umbral definida por el usuario.
    Se persiste fuera del núcleo; aquí solo se evalúa.
    """
    variable_code: str
    operator: RuleOperator
    threshold1: float
    threshold2: Optional[float] = None
    severity: RuleSeverity = RuleSeverity.WARNING
    message_template: Optional[str] = None
    is_active: bool = True
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlertRule":
        """
        Crea una regla desde un diccionario (registro del almacén de reglas).

        Raises:
            InvalidInputError: Si el operador o la severidad no existen,
                si falta threshold1, si un umbral no es numérico o si
                is_active no es booleano
        """
        if data.get("threshold1") is None:
            raise InvalidInputError(f"Alert rule without threshold1: {data!r}")
        return cls(
            variable_code=data.get("variable_code", ""),
            operator=_parse_enum(RuleOperator, data.get("operator"), "operator"),
            threshold1=_parse_float(data["threshold1"], "threshold1"),
            threshold2=_optional_float(data.get("threshold2"), "threshold2"),
            severity=_parse_enum(RuleSeverity, data.get("severity", "warning"), "severity"),
            message_template=data.get("message_template"),
            is_active=_parse_bool(data.get("is_active", True), "is_active"),
            name=data.get("name") or ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "variable_code": self.variable_code,
            "operator": self.operator.value,
            "threshold1": self.threshold1,
            "threshold2": self.threshold2,
            "severity": self.severity.value,
            "message_template": self.message_template,
            "is_active": self.is_active
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Resultados derivados
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Trend:
    variable_code: str
    direction: TrendDirection
    change_percent: float
    period: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variable_code": self.variable_code,
            "direction": self.direction.value,
            "change_percent": self.change_percent,
            "period": self.period
        }


@dataclass(frozen=True)
class Anomaly:
    """Lectura juzgada anormal por rango configurado o desviación estadística."""
    variable_code: str
    severity: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variable_code": self.variable_code,
            "severity": self.severity,
            "description": self.description
        }


@dataclass(frozen=True)
class Prediction:
    """Afirmación probabilística sobre la salud futura del dispositivo."""
    type: PredictionType
    probability: float
    timeframe: str
    description: str
    variable_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "type": self.type.value,
            "probability": self.probability,
            "timeframe": self.timeframe,
            "description": self.description
        }
        if self.variable_code is not None:
            result["variable_code"] = self.variable_code
        return result


@dataclass(frozen=True)
class Recommendation:
    priority: Priority
    title: str
    description: str
    action: str
    estimated_impact: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "action": self.action,
            "estimated_impact": self.estimated_impact
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Salida única del camino de análisis.
    Se construye desde cero en cada invocación.
    """
    health_score: int
    status: HealthStatus
    predictions: Tuple[Prediction, ...] = ()
    recommendations: Tuple[Recommendation, ...] = ()
    trends: Tuple[Trend, ...] = ()
    anomalies: Tuple[Anomaly, ...] = ()
    device_id: str = ""
    device_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para serialización JSON."""
        return {
            "device_id": self.device_id,
            "device_name": self.device_name,
            "health_score": self.health_score,
            "status": self.status.value,
            "predictions": [p.to_dict() for p in self.predictions],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "trends": [t.to_dict() for t in self.trends],
            "anomalies": [a.to_dict() for a in self.anomalies]
        }


@dataclass(frozen=True)
class RuleEvaluation:
    """Resultado de evaluar una regla contra un valor observado."""
    triggered: bool
    rendered_message: Optional[str] = None
    severity: Optional[RuleSeverity] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "triggered": self.triggered,
            "rendered_message": self.rendered_message,
            "severity": self.severity.value if self.severity else None
        }
