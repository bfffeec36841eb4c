"""
Synthetic push traffic for benchmarking a Prometheus aggregation gateway.

This package provides:
- WorkloadGenerator / run_iteration: one randomized push per call
- GeneratorConfig / load_config: gateway host and request options
- Data models for targets, samples and iteration results
"""

from .config import (
    ConfigValidationError,
    GeneratorConfig,
    load_config,
)
from .generator import (
    WorkloadGenerator,
    build_target,
    draw_samples,
    is_accepted,
    render_payload,
    run_iteration,
)
from .models import (
    IterationResult,
    MetricSamples,
    RoutingMode,
    Target,
)

__all__ = [
    # Generator
    "WorkloadGenerator",
    "run_iteration",
    "build_target",
    "draw_samples",
    "render_payload",
    "is_accepted",
    # Config
    "GeneratorConfig",
    "ConfigValidationError",
    "load_config",
    # Models
    "RoutingMode",
    "Target",
    "MetricSamples",
    "IterationResult",
]
