"""
In-process metrics for the back-office control plane.

Prometheus-compatible text export of:
- Order status changes and stock decrements
- Reconciliation queue activity (enqueued, synced, failed)
- Manual push/pull transfers
- Remote store call latency
"""
from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps
from typing import Any


@dataclass
class MetricValue:
    """Single metric value with metadata."""

    value: float
    labels: dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class _LabeledMetric:
    kind = "untyped"

    def __init__(self, name: str, description: str, labels: list[str] | None = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: dict[tuple, float] = defaultdict(float)

    def _key(self, labels: dict) -> tuple:
        return tuple(str(labels.get(name, "")) for name in self.label_names)

    def get(self, **labels) -> float:
        return self._values.get(self._key(labels), 0)

    def total(self) -> float:
        return sum(self._values.values())

    def collect(self) -> list[MetricValue]:
        return [
            MetricValue(value=value, labels=dict(zip(self.label_names, key)))
            for key, value in self._values.items()
        ]


class Counter(_LabeledMetric):
    """Monotonic counter."""

    kind = "counter"

    def inc(self, amount: float = 1, **labels) -> None:
        self._values[self._key(labels)] += amount


class Gauge(_LabeledMetric):
    """Value that can go up and down."""

    kind = "gauge"

    def set(self, value: float, **labels) -> None:
        self._values[self._key(labels)] = value

    def inc(self, amount: float = 1, **labels) -> None:
        self._values[self._key(labels)] += amount

    def dec(self, amount: float = 1, **labels) -> None:
        self._values[self._key(labels)] -= amount


class Histogram(_LabeledMetric):
    """Sum/count summary of observed durations."""

    kind = "histogram"

    def __init__(self, name: str, description: str, labels: list[str] | None = None):
        super().__init__(name, description, labels)
        self._counts: dict[tuple, int] = defaultdict(int)

    def observe(self, value: float, **labels) -> None:
        key = self._key(labels)
        self._values[key] += value
        self._counts[key] += 1

    def get_avg(self, **labels) -> float:
        key = self._key(labels)
        count = self._counts.get(key, 0)
        return self._values.get(key, 0) / count if count else 0

    def overall_avg(self) -> float:
        count = sum(self._counts.values())
        return self.total() / count if count else 0

    def collect(self) -> list[MetricValue]:
        result = []
        for key, total in self._values.items():
            labels = dict(zip(self.label_names, key))
            result.append(MetricValue(value=total, labels={**labels, "le": "sum"}))
            result.append(MetricValue(value=self._counts[key], labels={**labels, "le": "count"}))
        return result


class MetricsRegistry:
    """Central registry for all metrics."""

    def __init__(self):
        self._metrics: dict[str, _LabeledMetric] = {}
        self._start_time = datetime.now(timezone.utc)

        self.status_changes = self.counter(
            "backoffice_order_status_changes_total", "Order status changes", ["status"]
        )
        self.stock_decrements = self.counter(
            "backoffice_stock_decrements_total", "Stock decrement attempts by outcome", ["outcome"]
        )
        self.payments_validated = self.counter(
            "backoffice_payments_validated_total", "Orders whose payment was validated"
        )
        self.tickets_issued = self.counter(
            "backoffice_tickets_issued_total", "Loyalty tickets issued on payment validation"
        )
        self.sync_tasks = self.counter(
            "backoffice_sync_tasks_total", "Reconciliation tasks by outcome", ["entity_type", "outcome"]
        )
        self.sync_queue_depth = self.gauge(
            "backoffice_sync_queue_depth", "Reconciliation tasks waiting", ["status"]
        )
        self.transfers = self.counter(
            "backoffice_transfers_total", "Entities moved by push/pull", ["direction", "entity_type"]
        )
        self.remote_duration = self.histogram(
            "backoffice_remote_duration_seconds", "Remote store call duration", ["operation"]
        )

    def counter(self, name: str, description: str, labels: list[str] | None = None) -> Counter:
        if name not in self._metrics:
            self._metrics[name] = Counter(name, description, labels)
        return self._metrics[name]  # type: ignore[return-value]

    def gauge(self, name: str, description: str, labels: list[str] | None = None) -> Gauge:
        if name not in self._metrics:
            self._metrics[name] = Gauge(name, description, labels)
        return self._metrics[name]  # type: ignore[return-value]

    def histogram(self, name: str, description: str, labels: list[str] | None = None) -> Histogram:
        if name not in self._metrics:
            self._metrics[name] = Histogram(name, description, labels)
        return self._metrics[name]  # type: ignore[return-value]

    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus text format."""
        lines = [
            "# HELP backoffice_uptime_seconds Process uptime in seconds",
            "# TYPE backoffice_uptime_seconds gauge",
            f"backoffice_uptime_seconds {self.uptime_seconds():.2f}",
            "",
        ]

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.kind}")
            for mv in metric.collect():
                if mv.labels:
                    label_str = ",".join(f'{k}="{v}"' for k, v in mv.labels.items())
                    lines.append(f"{name}{{{label_str}}} {mv.value}")
                else:
                    lines.append(f"{name} {mv.value}")
            lines.append("")

        return "\n".join(lines)

    def get_summary(self) -> dict[str, Any]:
        return {
            "uptime_hours": round(self.uptime_seconds() / 3600, 2),
            "status_changes": self.status_changes.total(),
            "payments_validated": self.payments_validated.total(),
            "tickets_issued": self.tickets_issued.total(),
            "sync_failed": sum(
                mv.value for mv in self.sync_tasks.collect() if mv.labels.get("outcome") == "failed"
            ),
            "avg_remote_ms": round(self.remote_duration.overall_avg() * 1000, 2),
        }


# Global metrics instance
metrics = MetricsRegistry()


def track_remote_call(operation: str):
    """Decorator timing remote store coroutines."""

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.monotonic()
            try:
                return await func(*args, **kwargs)
            finally:
                metrics.remote_duration.observe(time.monotonic() - start_time, operation=operation)

        return wrapper

    return decorator
