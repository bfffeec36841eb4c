"""
Data models for the aggregation gateway load generator.

This module defines the values produced by a single load iteration:
the routing mode, the push target, the sampled metric values and the
classified result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class RoutingMode(Enum):
    """Shape of the push endpoint targeted by an iteration."""

    LABELED = "labeled"
    UNLABELED = "unlabeled"


@dataclass(frozen=True)
class Target:
    """
    Destination of a single push request.

    Attributes:
        base_host: Gateway base URL (e.g., "http://gw.local")
        mode: Routing mode the path was built for
        job: Job name segment (labeled mode only)
        label: Label name segment (labeled mode only)
        value: Label value segment (labeled mode only)
    """

    base_host: str
    mode: RoutingMode
    job: Optional[str] = None
    label: Optional[str] = None
    value: Optional[str] = None

    @property
    def path(self) -> str:
        """Request path for this target."""
        if self.mode is RoutingMode.LABELED:
            return f"/metrics/job/{self.job}/{self.label}/{self.value}"
        return "/metrics/"

    @property
    def url(self) -> str:
        """Full request URL."""
        return self.base_host.rstrip("/") + self.path

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "url": self.url,
            "mode": self.mode.value,
            "job": self.job,
            "label": self.label,
            "value": self.value,
        }


@dataclass(frozen=True)
class MetricSamples:
    """
    Values substituted into the push payload.

    Attributes:
        counter: Value for some_metric, in [1, 50)
        gauge: Value for another_metric, in [1000, 3000)
        requests_total: Value for k6_http_requests_total, in [3000, 4000)
    """

    counter: int
    gauge: int
    requests_total: int


@dataclass
class IterationResult:
    """
    Outcome of one push iteration.

    A transport failure leaves status_code as None and records the
    exception text in error.

    Attributes:
        target: Target the request was sent to
        status_code: HTTP status code, None when no response was received
        accepted: Whether the status code fell in the acceptance band
        error: Transport error description, if any
        elapsed_seconds: Wall time spent on the request
    """

    target: Target
    status_code: Optional[int]
    accepted: bool
    error: Optional[str] = None
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary representation."""
        return {
            "target": self.target.to_dict(),
            "status_code": self.status_code,
            "accepted": self.accepted,
            "error": self.error,
            "elapsed_seconds": self.elapsed_seconds,
        }
