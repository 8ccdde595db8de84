"""
Fixtures compartidas para los tests de Analysis Core.
"""

from datetime import datetime, timedelta

import pytest

from analysis_core.models import TelemetryPoint


START = datetime(2025, 12, 18, 0, 0, 0)


def build_window(code, values, start=START, step_hours=1):
    """Crea puntos ascendentes en el tiempo para una variable."""
    return [
        TelemetryPoint(
            variable_code=code,
            value=float(value),
            captured_at=start + timedelta(hours=i * step_hours)
        )
        for i, value in enumerate(values)
    ]


@pytest.fixture
def window():
    """Fixture que retorna el constructor de ventanas de telemetría."""
    return build_window
