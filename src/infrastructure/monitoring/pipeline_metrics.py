"""Pipeline metrics for Prometheus exposition.

Operational counters and histograms of the correspondence pipeline:
- Agent Runtime invocations by action and outcome, with latency
- Batch items by outcome
- Audit activities by kind
- Ledger anchors by terminal outcome

Labels: service, environment plus the metric-specific labels.
"""

from __future__ import annotations

import os
import threading

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from src.application.ports.pipeline_metrics import PipelineMetricsPort

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Agent calls are slow: 50ms to 60s
AGENT_LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)

_metrics_lock = threading.Lock()


class PipelineMetricsCollector(PipelineMetricsPort):
    """Collects pipeline metrics for Prometheus.

    Attributes:
        agent_invocations_total: Counter of Agent Runtime calls.
        agent_invocation_duration_seconds: Histogram of call latency.
        batch_items_total: Counter of batch item outcomes.
        activities_total: Counter of appended audit activities.
        ledger_anchors_total: Counter of terminal anchor outcomes.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize pipeline metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "correspondence-pipeline")

        self.agent_invocations_total = Counter(
            name="agent_invocations_total",
            documentation="Total Agent Runtime invocations by action and outcome",
            labelnames=["action_type", "outcome", "service", "environment"],
            registry=self._registry,
        )

        self.agent_invocation_duration_seconds = Histogram(
            name="agent_invocation_duration_seconds",
            documentation="Agent Runtime invocation duration in seconds",
            labelnames=["action_type", "service", "environment"],
            buckets=AGENT_LATENCY_BUCKETS,
            registry=self._registry,
        )

        self.batch_items_total = Counter(
            name="batch_items_total",
            documentation="Total batch items by outcome (success, error, skipped)",
            labelnames=["outcome", "service", "environment"],
            registry=self._registry,
        )

        self.activities_total = Counter(
            name="audit_activities_total",
            documentation="Total audit activities appended by kind",
            labelnames=["action_type", "service", "environment"],
            registry=self._registry,
        )

        self.ledger_anchors_total = Counter(
            name="ledger_anchors_total",
            documentation="Total ledger anchors by terminal outcome",
            labelnames=["outcome", "service", "environment"],
            registry=self._registry,
        )

    def record_agent_invocation(
        self, action_type: str, outcome: str, duration_seconds: float
    ) -> None:
        """Record one Agent Runtime call.

        Args:
            action_type: Concrete action invoked.
            outcome: "success" or the failure reason.
            duration_seconds: Call latency.
        """
        self.agent_invocations_total.labels(
            action_type=action_type,
            outcome=outcome,
            service=self._service_name,
            environment=self._environment,
        ).inc()
        self.agent_invocation_duration_seconds.labels(
            action_type=action_type,
            service=self._service_name,
            environment=self._environment,
        ).observe(duration_seconds)

    def record_batch_item(self, outcome: str) -> None:
        """Record one batch item outcome."""
        self.batch_items_total.labels(
            outcome=outcome,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_activity(self, action_type: str) -> None:
        """Record one appended audit activity."""
        self.activities_total.labels(
            action_type=action_type,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def record_ledger_anchor(self, outcome: str) -> None:
        """Record a terminal ledger anchor outcome (confirmed, failed)."""
        self.ledger_anchors_total.labels(
            outcome=outcome,
            service=self._service_name,
            environment=self._environment,
        ).inc()

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry

    def generate_metrics(self) -> bytes:
        """Generate Prometheus exposition format output."""
        return generate_latest(self._registry)


# Singleton instance
_pipeline_metrics_collector: PipelineMetricsCollector | None = None


def get_pipeline_metrics_collector() -> PipelineMetricsCollector:
    """Get the singleton PipelineMetricsCollector instance (thread-safe).

    Uses double-checked locking pattern for thread-safe lazy initialization.
    """
    global _pipeline_metrics_collector
    if _pipeline_metrics_collector is None:
        with _metrics_lock:
            if _pipeline_metrics_collector is None:
                _pipeline_metrics_collector = PipelineMetricsCollector()
    return _pipeline_metrics_collector


def reset_pipeline_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _pipeline_metrics_collector
    with _metrics_lock:
        _pipeline_metrics_collector = None
