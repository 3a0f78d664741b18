"""Metrics collection for the request pipeline."""

from dataclasses import dataclass, field
from typing import ClassVar

from src.errors import FaultKind


@dataclass
class PipelineMetrics:
    """Metrics for request pipeline runs.

    Singleton class that tracks transport calls, cache hits and writes,
    failures by fault kind and best-effort logging failures.
    """

    requests_sent_total: int = 0
    responses_by_status: dict[int, int] = field(default_factory=dict)
    cache_hits_total: int = 0
    cache_writes_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    recovered_total: int = 0
    log_write_failures_total: int = 0

    _instance: ClassVar["PipelineMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "PipelineMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_response(self, status_code: int) -> None:
        """Record a response received from the transport.

        Args:
            status_code: HTTP status code.
        """
        self.requests_sent_total += 1
        self.responses_by_status[status_code] = (
            self.responses_by_status.get(status_code, 0) + 1
        )

    def record_cache_hit(self) -> None:
        """Record a run served from cache."""
        self.cache_hits_total += 1

    def record_cache_write(self) -> None:
        """Record a response written to cache."""
        self.cache_writes_total += 1

    def record_failure(self, fault_kind: FaultKind | None) -> None:
        """Record a failure reaching the interception hook.

        Args:
            fault_kind: Classification of the failure, None for foreign errors.
        """
        key = fault_kind.value if fault_kind is not None else "UNCLASSIFIED"
        self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def record_recovery(self) -> None:
        """Record a failure the interception hook turned into a success."""
        self.recovered_total += 1

    def record_log_write_failure(self) -> None:
        """Record a log artifact that could not be written."""
        self.log_write_failures_total += 1

    def to_dict(self) -> dict[str, int | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_sent_total": self.requests_sent_total,
            "responses_by_status": dict(self.responses_by_status),
            "cache_hits_total": self.cache_hits_total,
            "cache_writes_total": self.cache_writes_total,
            "failures_total": dict(self.failures_total),
            "recovered_total": self.recovered_total,
            "log_write_failures_total": self.log_write_failures_total,
        }
