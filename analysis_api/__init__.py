"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                    🎯 Analysis API - Device Telemetry                        ║
║                       HTTP adapter for Analysis Core                         ║
╚══════════════════════════════════════════════════════════════════════════════╝

Adaptador HTTP delgado sobre analysis_core. Valida payloads, invoca el
núcleo y agrega metadatos de la respuesta (resumen, fecha de análisis).
El núcleo nunca importa este paquete.
"""

__version__ = "1.0.0"
