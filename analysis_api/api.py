#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                    🎯 Analysis API - Device Telemetry                        ║
║                  Device analysis & alert rule evaluation                     ║
╚══════════════════════════════════════════════════════════════════════════════╝

API FastAPI para:
- Analizar una ventana de telemetría de uno o varios dispositivos
- Evaluar reglas de alerta contra una lectura individual

La obtención de datos, el almacenamiento de reglas y el envío de
notificaciones quedan del lado del llamador.

Usage:
    python -m analysis_api.api

    o con uvicorn:
    uvicorn analysis_api.api:app --reload --port 8002
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from analysis_core import (
    AlertRule,
    AnalysisRequest,
    AnalysisResult,
    AnalysisService,
    DeviceConfig,
    InvalidInputError,
    RuleContext,
    TelemetryPoint,
    generate_analysis_summary,
)
from analysis_core.rule_evaluator import render_default_message


# ═══════════════════════════════════════════════════════════════════════════════
# Configuración de Logging
# ═══════════════════════════════════════════════════════════════════════════════

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s"
)
logger = logging.getLogger("analysis_api.api")


# ═══════════════════════════════════════════════════════════════════════════════
# FastAPI App
# ═══════════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="🎯 Device Analysis API",
    description="Trend, anomaly, prediction and alert rule evaluation for device telemetry",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════════
# Pydantic Models
# ═══════════════════════════════════════════════════════════════════════════════

class TelemetryPointInput(BaseModel):
    variable_code: str = Field(..., min_length=1)
    value: float
    captured_at: datetime


class VariableInput(BaseModel):
    code: str = Field(..., min_length=1)
    label: str
    unit: str = ""
    min_value: Optional[float] = None
    max_value: Optional[float] = None


class DeviceAnalysisInput(BaseModel):
    """Ventana de telemetría y configuración de un dispositivo."""
    device_id: str = ""
    device_name: str = ""
    category: str = "other"
    variables: List[VariableInput] = Field(default_factory=list)
    telemetry: List[TelemetryPointInput] = Field(default_factory=list)
    period: Optional[str] = None


class AlertRuleInput(BaseModel):
    name: str = ""
    variable_code: str
    operator: str
    threshold1: float
    threshold2: Optional[float] = None
    severity: str = "warning"
    message_template: Optional[str] = None
    is_active: bool = True


class RuleEvaluationInput(BaseModel):
    """Lectura individual y reglas candidatas."""
    rules: List[AlertRuleInput]
    variable_code: str
    value: float
    device: str = ""
    variable: str = ""


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str


# ═══════════════════════════════════════════════════════════════════════════════
# Conversión a modelos del núcleo
# ═══════════════════════════════════════════════════════════════════════════════

service = AnalysisService()


def _to_request(data: DeviceAnalysisInput) -> AnalysisRequest:
    config = DeviceConfig.from_dict({
        "category": data.category,
        "variables": [
            {
                "code": v.code,
                "label": v.label,
                "unit": v.unit,
                "min_value": v.min_value,
                "max_value": v.max_value
            }
            for v in data.variables
        ]
    })
    telemetry = [
        TelemetryPoint.from_dict({
            "variable_code": p.variable_code,
            "value": p.value,
            "captured_at": p.captured_at
        })
        for p in data.telemetry
    ]
    return AnalysisRequest(
        telemetry=telemetry,
        config=config,
        device_id=data.device_id,
        device_name=data.device_name,
        period=data.period
    )


def _to_rule(data: AlertRuleInput) -> AlertRule:
    return AlertRule.from_dict({
        "name": data.name,
        "variable_code": data.variable_code,
        "operator": data.operator,
        "threshold1": data.threshold1,
        "threshold2": data.threshold2,
        "severity": data.severity,
        "message_template": data.message_template,
        "is_active": data.is_active
    })


def _analysis_response(result: AnalysisResult, telemetry_count: int) -> Dict[str, Any]:
    return {
        **result.to_dict(),
        "summary": generate_analysis_summary(result),
        "telemetry_count": telemetry_count,
        "analysis_date": datetime.now().isoformat()
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Health & Info
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/", tags=["Health"])
async def root():
    """Endpoint raíz con información de la API."""
    return {
        "service": "Device Analysis API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "analysis": "/api/analysis",
            "batch": "/api/analysis/batch",
            "rules": "/api/rules/evaluate"
        }
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Verifica el estado del servicio."""
    return HealthResponse(
        status="healthy",
        service="analysis-api",
        timestamp=datetime.now().isoformat()
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Análisis
# ═══════════════════════════════════════════════════════════════════════════════

@app.post("/api/analysis", tags=["Analysis"])
def analyze_device(data: DeviceAnalysisInput):
    """
    🔍 Analiza la ventana de telemetría de un dispositivo.

    Retorna tendencias, anomalías, predicciones, recomendaciones,
    puntaje de salud y un resumen en markdown.
    """
    try:
        request = _to_request(data)
        result = service.analyze(
            request.telemetry,
            request.config,
            device_id=request.device_id,
            device_name=request.device_name,
            period=request.period
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error analyzing device {data.device_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    if result.status.value == "critical":
        logger.warning(f"🔴 CRITICAL device health: {data.device_id or 'device'} ({result.health_score})")

    return _analysis_response(result, len(request.telemetry))


@app.post("/api/analysis/batch", tags=["Analysis"])
def analyze_batch(data_list: List[DeviceAnalysisInput]):
    """
    📦 Analiza varios dispositivos en paralelo.
    """
    try:
        requests = [_to_request(data) for data in data_list]
        results = service.analyze_batch(requests)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error analyzing batch of {len(data_list)} devices: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return {
        "processed": len(results),
        "results": [
            _analysis_response(result, len(request.telemetry))
            for request, result in zip(requests, results)
        ]
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Reglas de alerta
# ═══════════════════════════════════════════════════════════════════════════════

@app.post("/api/rules/evaluate", tags=["Rules"])
def evaluate_rules_endpoint(data: RuleEvaluationInput):
    """
    🔔 Evalúa reglas de alerta contra una lectura.

    Solo retorna las reglas disparadas. Cuando la regla no trae plantilla
    se usa el mensaje por defecto.
    """
    try:
        rules = [_to_rule(rule) for rule in data.rules]
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    context = RuleContext(device=data.device, variable=data.variable)
    triggered = service.evaluate_reading(rules, data.variable_code, data.value, context)

    alerts = []
    for rule, evaluation in triggered:
        alerts.append({
            "rule": rule.to_dict(),
            "severity": evaluation.severity.value,
            "message": evaluation.rendered_message or render_default_message(rule, data.value, context)
        })
        logger.info(f"📥 Rule triggered: {rule.name or rule.operator.value} [{data.variable_code}] = {data.value}")

    return {
        "variable_code": data.variable_code,
        "value": data.value,
        "evaluated": sum(1 for r in rules if r.is_active and r.variable_code == data.variable_code),
        "triggered": len(alerts),
        "alerts": alerts
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Main Entry Point
# ═══════════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "analysis_api.api:app",
        host=os.environ.get("ANALYSIS_API_HOST", "0.0.0.0"),
        port=int(os.environ.get("ANALYSIS_API_PORT", "8002")),
        log_level="info",
    )
