"""Infrastructure monitoring components.

Prometheus metrics collection for the correspondence pipeline.
"""

from src.infrastructure.monitoring.pipeline_metrics import (
    METRICS_CONTENT_TYPE,
    PipelineMetricsCollector,
    get_pipeline_metrics_collector,
    reset_pipeline_metrics_collector,
)

__all__ = [
    "METRICS_CONTENT_TYPE",
    "PipelineMetricsCollector",
    "get_pipeline_metrics_collector",
    "reset_pipeline_metrics_collector",
]
