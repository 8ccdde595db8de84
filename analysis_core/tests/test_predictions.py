"""
Tests unitarios para el predictor, las recomendaciones y el puntaje de salud.
"""

from datetime import datetime, timedelta

import pytest

from analysis_core.models import (
    Anomaly,
    DeviceCategory,
    DeviceConfig,
    HealthStatus,
    Prediction,
    PredictionType,
    Priority,
    Trend,
    TrendDirection,
    VariableDefinition,
)
from analysis_core.anomaly_detector import detect_anomalies
from analysis_core.predictor import estimate_days_to_max, generate_predictions
from analysis_core.recommendations import generate_recommendations
from analysis_core.health_scorer import (
    calculate_connectivity_health,
    calculate_health_score,
    status_for_score,
)
from analysis_core.trend_analyzer import calculate_trends


def run_predictor(telemetry, config):
    trends = calculate_trends(telemetry, config)
    anomalies = detect_anomalies(telemetry, config)
    return generate_predictions(telemetry, trends, anomalies, config)


def make_config(category, *variables):
    return DeviceConfig(category=category, variables=tuple(variables))


class TestPredictor:
    """Tests para el predictor."""

    def test_water_rapid_decline(self, window):
        config = make_config(DeviceCategory.WATER, VariableDefinition("F", "Flow", "L/min"))

        predictions = run_predictor(window("F", [100, 100, 60, 60]), config)

        assert len(predictions) == 1
        assert predictions[0].type == PredictionType.ANOMALY
        assert predictions[0].probability == 0.7
        assert predictions[0].timeframe == "1-2 weeks"
        assert predictions[0].variable_code == "F"

    def test_rapid_decline_only_for_water(self, window):
        config = make_config(DeviceCategory.POWER, VariableDefinition("F", "Flow", "L/min"))

        assert run_predictor(window("F", [100, 100, 60, 60]), config) == []

    def test_volatile_needs_calibration(self, window):
        config = make_config(DeviceCategory.OTHER, VariableDefinition("P", "Pressure", "PSI"))

        predictions = run_predictor(window("P", [10, 50, 10, 50]), config)

        assert [(p.type, p.probability, p.timeframe) for p in predictions] == [
            (PredictionType.MAINTENANCE, 0.6, "2-4 weeks")
        ]

    def test_time_to_breach(self, window):
        """Tendencia +20% con último valor 120 y máximo 130 -> ~2.9 días."""
        config = make_config(
            DeviceCategory.INDUSTRIAL, VariableDefinition("T", "Temperature", "C", max_value=130)
        )

        predictions = run_predictor(window("T", [100, 100, 120, 120]), config)

        assert len(predictions) == 1
        assert predictions[0].type == PredictionType.FAILURE
        assert predictions[0].timeframe == "3 days"
        assert predictions[0].probability == pytest.approx(0.5 + (1 - (10 / (0.2 * 120 / 7)) / 30) * 0.3)
        assert 0.5 < predictions[0].probability <= 0.8

    def test_breach_beyond_horizon(self, window):
        config = make_config(
            DeviceCategory.INDUSTRIAL, VariableDefinition("T", "Temperature", "C", max_value=1000)
        )

        assert run_predictor(window("T", [100, 100, 120, 120]), config) == []

    def test_range_breach_becomes_immediate_failure(self, window):
        config = make_config(
            DeviceCategory.INDUSTRIAL, VariableDefinition("T", "Temperature", "C", max_value=110)
        )

        predictions = run_predictor(window("T", [100, 100, 120, 120]), config)

        assert len(predictions) == 1
        assert predictions[0].timeframe == "immediate"
        assert predictions[0].probability == 0.8

    def test_statistical_anomaly_is_not_a_failure(self):
        config = make_config(DeviceCategory.OTHER)
        anomaly = Anomaly("T", 0.6, "unusual")

        assert generate_predictions([], [], [anomaly], config) == []

    def test_water_level_critical(self, window):
        config = make_config(DeviceCategory.WATER, VariableDefinition("WL", "Water Level", "%"))

        predictions = run_predictor(window("WL", [15, 15, 15]), config)

        assert len(predictions) == 1
        assert predictions[0].type == PredictionType.MAINTENANCE
        assert predictions[0].probability == 0.8
        assert predictions[0].timeframe == "1-3 days"
        assert predictions[0].variable_code is None

    def test_water_level_uses_both_codes(self, window):
        config = make_config(DeviceCategory.WATER)

        predictions = run_predictor(window("W", [10, 10]) + window("WL", [40, 40]), config)

        # Promedio combinado 25 -> sin alerta de recarga
        assert predictions == []

    def test_voltage_instability(self, window):
        config = make_config(DeviceCategory.POWER)

        low = run_predictor(window("V", [200, 200, 200]), config)
        normal = run_predictor(window("V", [230, 230, 230]), config)

        assert [(p.type, p.timeframe) for p in low] == [(PredictionType.ANOMALY, "ongoing")]
        assert normal == []

    def test_sorted_by_probability(self, window):
        config = make_config(
            DeviceCategory.WATER,
            VariableDefinition("F", "Flow", "L/min"),
            VariableDefinition("WL", "Water Level", "%"),
        )
        telemetry = window("F", [100, 100, 60, 60]) + window("WL", [15, 15, 15, 15])

        predictions = run_predictor(telemetry, config)

        assert [p.probability for p in predictions] == [0.8, 0.7]

    def test_ties_keep_insertion_order(self):
        config = make_config(DeviceCategory.OTHER)
        anomalies = [Anomaly("A", 0.8, "first"), Anomaly("B", 0.8, "second")]

        predictions = generate_predictions([], [], anomalies, config)

        assert [p.description for p in predictions] == ["first", "second"]

    def test_estimate_days_to_max(self):
        assert estimate_days_to_max(0, 100, 150) is None
        assert estimate_days_to_max(-10, 100, 150) is None
        assert estimate_days_to_max(70, 100, 110) == pytest.approx(1.0)


class TestRecommendations:
    """Tests para el sintetizador de recomendaciones."""

    @pytest.fixture
    def other_config(self):
        return make_config(DeviceCategory.OTHER)

    def test_business_as_usual_without_failures(self, other_config):
        predictions = [Prediction(PredictionType.MAINTENANCE, 0.6, "2-4 weeks", "unstable")]

        recs = generate_recommendations(predictions, [], other_config)

        assert [r.priority for r in recs] == [Priority.MEDIUM, Priority.LOW]
        assert recs[0].action == "Plan maintenance within 2-4 weeks"
        assert recs[-1].title == "Regular Maintenance Schedule"
        assert sum(1 for r in recs if r.title == "Regular Maintenance Schedule") == 1

    def test_empty_inputs(self, other_config):
        recs = generate_recommendations([], [], other_config)

        assert len(recs) == 1
        assert recs[0].priority == Priority.LOW

    def test_critical_for_likely_failure(self, other_config):
        predictions = [
            Prediction(PredictionType.MAINTENANCE, 0.6, "2-4 weeks", "unstable"),
            Prediction(PredictionType.FAILURE, 0.8, "immediate", "Temp above max"),
        ]

        recs = generate_recommendations(predictions, [], other_config)

        assert [r.priority for r in recs] == [Priority.CRITICAL, Priority.MEDIUM]
        assert recs[0].title == "Immediate Attention Required"
        assert recs[0].description == "Temp above max"
        assert recs[0].action == "Schedule immediate inspection and maintenance"

    def test_unlikely_failure_is_not_critical(self, other_config):
        predictions = [Prediction(PredictionType.FAILURE, 0.6, "20 days", "maybe")]

        recs = generate_recommendations(predictions, [], other_config)

        assert [r.priority for r in recs] == [Priority.LOW]

    def test_water_level_decreasing(self):
        config = make_config(DeviceCategory.WATER)
        trends = [Trend("WL", TrendDirection.DECREASING, -12.0, "last 7 days")]

        recs = generate_recommendations([], trends, config)

        assert [r.title for r in recs] == ["Monitor Water Consumption", "Regular Maintenance Schedule"]

    def test_energy_increase(self):
        config = make_config(DeviceCategory.POWER)
        rising = [Trend("KWH", TrendDirection.INCREASING, 20.0, "last 7 days")]
        mild = [Trend("KWH", TrendDirection.INCREASING, 15.0, "last 7 days")]

        recs = generate_recommendations([], rising, config)

        assert recs[0].priority == Priority.MEDIUM
        assert recs[0].description == "Energy usage up 20% over the period"
        assert len(generate_recommendations([], mild, config)) == 1


class TestHealthScorer:
    """Tests para el puntaje de salud."""

    def test_perfect_score(self):
        assert calculate_health_score([], [], []) == 100

    def test_weighted_deductions(self):
        predictions = [
            Prediction(PredictionType.FAILURE, 0.8, "immediate", "x"),
            Prediction(PredictionType.MAINTENANCE, 0.6, "2-4 weeks", "y"),
            Prediction(PredictionType.ANOMALY, 0.7, "ongoing", "z"),
        ]
        anomalies = [Anomaly("T", 0.8, "a")]
        trends = [Trend("T", TrendDirection.VOLATILE, 0.0, "last 7 days")]

        # 100 - 24 - 9 - 14 - 8 - 5 = 40
        assert calculate_health_score(predictions, anomalies, trends) == 40

    def test_rounds_once_at_the_end(self):
        predictions = [Prediction(PredictionType.FAILURE, 0.77, "3 days", "x")]

        # 100 - 23.1 = 76.9 -> 77
        assert calculate_health_score(predictions, [], []) == 77

    def test_clamped_to_zero(self):
        predictions = [Prediction(PredictionType.FAILURE, 1.0, "immediate", "x")] * 10

        assert calculate_health_score(predictions, [], []) == 0

    @pytest.mark.parametrize("score,expected", [
        (100, HealthStatus.HEALTHY),
        (80, HealthStatus.HEALTHY),
        (79, HealthStatus.WARNING),
        (50, HealthStatus.WARNING),
        (49, HealthStatus.CRITICAL),
        (0, HealthStatus.CRITICAL),
    ])
    def test_status_boundaries(self, score, expected):
        assert status_for_score(score) == expected


class TestConnectivityHealth:
    """Tests para la salud de conectividad."""

    NOW = datetime(2025, 12, 18, 12, 0, 0)

    def test_online_device(self):
        health = calculate_connectivity_health(
            self.NOW - timedelta(hours=1), "active", 0, 0, 0, now=self.NOW
        )

        assert health.score == 100
        assert health.status == HealthStatus.HEALTHY
        assert health.issues == []

    def test_never_seen_and_suspended(self):
        health = calculate_connectivity_health(None, "suspended", 0, 0, 0, now=self.NOW)

        assert health.score == 30
        assert health.status == HealthStatus.CRITICAL
        assert "Device has never reported data" in health.issues

    def test_offline_for_a_day(self):
        health = calculate_connectivity_health(
            self.NOW - timedelta(hours=30), "active", 6, 0, 4, now=self.NOW
        )

        # 100 - 15 - 10 - 10
        assert health.score == 65
        assert health.status == HealthStatus.WARNING
        assert "Elevated alerts: 6 alerts" in health.issues
