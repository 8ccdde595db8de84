"""
Tests de integración para el servicio de análisis.
"""

import pytest

from analysis_core import (
    AlertRule,
    AnalysisPolicy,
    AnalysisRequest,
    AnalysisService,
    DeviceCategory,
    DeviceConfig,
    HealthStatus,
    InvalidInputError,
    Priority,
    RuleContext,
    RuleOperator,
    TelemetryPoint,
    VariableDefinition,
    analyze_device_telemetry,
    generate_analysis_summary,
)


@pytest.fixture
def water_config():
    return DeviceConfig(
        category=DeviceCategory.WATER,
        variables=(
            VariableDefinition("WL", "Water Level", "%", min_value=10, max_value=100),
            VariableDefinition("F", "Flow", "L/min"),
        )
    )


class TestPipeline:
    """Tests para el pipeline completo."""

    def test_low_water_level(self, window, water_config):
        telemetry = window("WL", [16, 15, 15, 14]) + window("F", [30, 30, 30, 30])

        result = analyze_device_telemetry(telemetry, water_config, device_id="7", device_name="Tank")

        refill = [p for p in result.predictions if p.timeframe == "1-3 days"]
        assert len(refill) == 1
        assert refill[0].probability == 0.8
        assert result.device_id == "7"
        assert 0 <= result.health_score <= 100
        assert result.status in (HealthStatus.HEALTHY, HealthStatus.WARNING, HealthStatus.CRITICAL)

    def test_healthy_device(self, window, water_config):
        telemetry = window("WL", [60, 61, 60, 61]) + window("F", [30, 30, 30, 30])

        result = analyze_device_telemetry(telemetry, water_config)

        assert result.health_score == 100
        assert result.status == HealthStatus.HEALTHY
        assert result.predictions == ()
        assert [r.priority for r in result.recommendations] == [Priority.LOW]

    def test_empty_window(self, water_config):
        result = analyze_device_telemetry([], water_config)

        assert result.trends == ()
        assert result.anomalies == ()
        assert result.health_score == 100

    def test_deterministic(self, window, water_config):
        telemetry = window("WL", [50, 40, 30, 5]) + window("F", [10, 50, 10, 50])

        first = analyze_device_telemetry(telemetry, water_config)
        second = analyze_device_telemetry(telemetry, water_config)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_policy_override(self, window, water_config):
        telemetry = window("F", [10, 50, 10, 50])
        strict = AnalysisPolicy.from_dict({"health": {"healthy_min": 90}})

        default_result = analyze_device_telemetry(telemetry, water_config)
        strict_result = analyze_device_telemetry(telemetry, water_config, policy=strict)

        # 100 - 0.6 * 15 - 5 = 86
        assert default_result.health_score == 86
        assert default_result.status == HealthStatus.HEALTHY
        assert strict_result.status == HealthStatus.WARNING


class TestPolicy:
    """Tests para la tabla de políticas."""

    def test_partial_override(self):
        policy = AnalysisPolicy.from_dict({"health": {"healthy_min": 90}})

        assert policy.health.healthy_min == 90
        assert policy.health.warning_min == 50
        assert policy.anomaly.outlier_std_devs == 2.0

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            AnalysisPolicy.from_dict({"health": {"excellent_min": 95}})
        with pytest.raises(ValueError):
            AnalysisPolicy.from_dict({"billing": {}})


class TestAnalysisService:
    """Tests para el orquestador."""

    @pytest.fixture
    def service(self):
        return AnalysisService(max_workers=4)

    def test_batch_keeps_order(self, service, window, water_config):
        requests = [
            AnalysisRequest(window("WL", [15, 15]), water_config, device_id="low"),
            AnalysisRequest(window("WL", [60, 60]), water_config, device_id="ok"),
            AnalysisRequest([], water_config, device_id="empty"),
        ]

        results = service.analyze_batch(requests)

        assert [r.device_id for r in results] == ["low", "ok", "empty"]
        assert results[0].health_score < results[1].health_score

    def test_batch_empty(self, service):
        assert service.analyze_batch([]) == []

    def test_evaluate_reading_returns_triggered_only(self, service):
        rules = [
            AlertRule("WL", RuleOperator.LT, 20, message_template="{device} low: {value}%"),
            AlertRule("WL", RuleOperator.GT, 90),
        ]

        triggered = service.evaluate_reading(rules, "WL", 12, RuleContext(device="Tank"))

        assert len(triggered) == 1
        assert triggered[0][1].rendered_message == "Tank low: 12%"


class TestSummary:
    """Tests para el resumen markdown."""

    def test_summary_sections(self, window, water_config):
        result = analyze_device_telemetry(window("WL", [15, 15, 15]), water_config)

        summary = generate_analysis_summary(result)

        assert summary.startswith(f"{result.status.emoji} **Device Health: {result.health_score}%**")
        assert "**Key Findings:**" in summary
        assert "🟡 Water level critically low - refill required soon (80% confidence, 1-3 days)" in summary
        assert "**Recommendations:**" in summary

    def test_healthy_summary(self):
        result = analyze_device_telemetry([], DeviceConfig())

        summary = generate_analysis_summary(result)

        assert summary.startswith("✅ **Device Health: 100%** (HEALTHY)")
        assert "**Key Findings:**" not in summary
        assert "💡 **Regular Maintenance Schedule**" in summary


class TestModels:
    """Tests para la conversión desde diccionarios."""

    def test_telemetry_point_from_dict(self):
        point = TelemetryPoint.from_dict({
            "variable_code": "WL", "value": "15.5", "captured_at": "2025-12-18T01:00:00Z"
        })

        assert point.value == 15.5
        assert point.captured_at.utcoffset().total_seconds() == 0

    @pytest.mark.parametrize("data", [
        {"variable_code": "WL", "value": "abc", "captured_at": "2025-12-18T01:00:00"},
        {"variable_code": "WL", "captured_at": "2025-12-18T01:00:00"},
        {"variable_code": "WL", "value": 1, "captured_at": "yesterday"},
    ])
    def test_telemetry_point_rejects_malformed(self, data):
        with pytest.raises(InvalidInputError):
            TelemetryPoint.from_dict(data)

    @pytest.mark.parametrize("field_name", ["min_value", "max_value"])
    def test_variable_rejects_non_numeric_range(self, field_name):
        with pytest.raises(InvalidInputError):
            VariableDefinition.from_dict({"code": "T", field_name: "abc"})

    def test_device_config_from_dict(self):
        config = DeviceConfig.from_dict({
            "category": "WATER",
            "variables": [{"code": "WL", "min_value": "10"}]
        })

        assert config.category == DeviceCategory.WATER
        assert config.get_variable("WL").label == "WL"
        assert config.get_variable("WL").min_value == 10.0

    def test_result_is_immutable_value(self, window, water_config):
        result = analyze_device_telemetry(window("WL", [15, 15, 15]), water_config)

        assert isinstance(result.predictions, tuple)
        assert hash(result) == hash(analyze_device_telemetry(window("WL", [15, 15, 15]), water_config))
