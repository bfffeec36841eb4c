"""
Workload generator for aggregation gateway benchmarks.

Each call to run_iteration produces one unit of push traffic: a randomly
routed target, a payload in the Prometheus exposition format filled with
random samples, one HTTP request, and a classification of the response.

Iterations share no state. The random source and the HTTP client are
passed in, so the load-testing host can run iterations concurrently and
tests can drive them deterministically.
"""

import logging
import math
import random
import time
from typing import Optional, Sequence, TypeVar

import httpx

from .config import GeneratorConfig
from .models import IterationResult, MetricSamples, RoutingMode, Target

logger = logging.getLogger(__name__)

T = TypeVar("T")

JOBS = ("job1", "job2", "job3", "job4")
LABELS = ("foo", "bar", "baz")
LABEL_VALUES = ("qux", "fred", "thud")

# Half-open [low, high) bounds for each payload value
COUNTER_BOUNDS = (1, 50)
GAUGE_BOUNDS = (1000, 3000)
REQUESTS_TOTAL_BOUNDS = (3000, 4000)

ACCEPTED_STATUS_MIN = 100
ACCEPTED_STATUS_MAX = 300

PAYLOAD_TEMPLATE = (
    "# TYPE some_metric counter\n"
    'some_metric{{label="val1"}} {counter}\n'
    "# TYPE another_metric gauge\n"
    "# HELP another_metric Just an example.\n"
    "another_metric {gauge}\n"
    'k6_http_requests_total{{method="post",code="200"}} {requests_total}\n'
)


def choose(candidates: Sequence[T], rng: random.Random) -> T:
    """Pick one candidate uniformly at random."""
    return candidates[math.floor(rng.random() * len(candidates))]


def rand_int(low: int, high: int, rng: random.Random) -> int:
    """Draw a uniform integer from [low, high)."""
    return math.floor(rng.random() * (high - low)) + low


def build_target(base_host: str, mode: RoutingMode, rng: random.Random) -> Target:
    """
    Build a push target for the given routing mode.

    Job, label and value are drawn independently, and only in labeled mode.
    """
    if mode is RoutingMode.UNLABELED:
        return Target(base_host=base_host, mode=mode)

    return Target(
        base_host=base_host,
        mode=mode,
        job=choose(JOBS, rng),
        label=choose(LABELS, rng),
        value=choose(LABEL_VALUES, rng),
    )


def draw_samples(rng: random.Random) -> MetricSamples:
    """Draw the three payload values."""
    return MetricSamples(
        counter=rand_int(*COUNTER_BOUNDS, rng),
        gauge=rand_int(*GAUGE_BOUNDS, rng),
        requests_total=rand_int(*REQUESTS_TOTAL_BOUNDS, rng),
    )


def render_payload(samples: MetricSamples) -> str:
    """Render the push body in the Prometheus exposition format."""
    return PAYLOAD_TEMPLATE.format(
        counter=samples.counter,
        gauge=samples.gauge,
        requests_total=samples.requests_total,
    )


def is_accepted(status_code: int) -> bool:
    """Whether a status code falls in the [100, 300) acceptance band."""
    return ACCEPTED_STATUS_MIN <= status_code < ACCEPTED_STATUS_MAX


class WorkloadGenerator:
    """
    Produces single push iterations against a gateway.

    The generator holds only immutable configuration; every call to
    run_iteration builds its own target, payload and (unless one is given)
    random source and HTTP client.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config

    def run_iteration(
        self,
        rng: Optional[random.Random] = None,
        client: Optional[httpx.Client] = None,
    ) -> IterationResult:
        """Run one push iteration.

        Args:
            rng: Random source; a fresh unseeded one is used when omitted
            client: HTTP client to send through; a short-lived client is
                created and closed when omitted

        Returns:
            Classified result. Request failures (transport errors,
            undecodable responses, redirect loops) are returned as not
            accepted with no status code, never raised.
        """
        if rng is None:
            rng = random.Random()

        target = build_target(self.config.base_host, self.config.routing_mode, rng)
        payload = render_payload(draw_samples(rng))

        if client is not None:
            return self._send(client, target, payload)

        with httpx.Client(timeout=self.config.timeout_seconds) as own_client:
            return self._send(own_client, target, payload)

    def _send(self, client: httpx.Client, target: Target, payload: str) -> IterationResult:
        start = time.perf_counter()
        try:
            response = client.request(
                self.config.method,
                target.url,
                content=payload.encode("utf-8"),
                headers=self.config.request_headers(),
                auth=self.config.basic_auth,
                timeout=self.config.timeout_seconds,
            )
        except httpx.RequestError as e:
            elapsed = time.perf_counter() - start
            logger.warning("Push to %s failed: %s", target.url, e)
            return IterationResult(
                target=target,
                status_code=None,
                accepted=False,
                error=f"{type(e).__name__}: {e}",
                elapsed_seconds=elapsed,
            )

        elapsed = time.perf_counter() - start
        accepted = is_accepted(response.status_code)
        logger.debug(
            "%s %s -> %d (%.3fs)",
            self.config.method, target.url, response.status_code, elapsed,
        )
        return IterationResult(
            target=target,
            status_code=response.status_code,
            accepted=accepted,
            elapsed_seconds=elapsed,
        )


def run_iteration(
    config: GeneratorConfig,
    rng: Optional[random.Random] = None,
    client: Optional[httpx.Client] = None,
) -> IterationResult:
    """Run one push iteration for the given configuration."""
    return WorkloadGenerator(config).run_iteration(rng=rng, client=client)
