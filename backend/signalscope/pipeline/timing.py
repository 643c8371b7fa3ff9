"""
[TIMING] log lines for stage internals and LLM batches.

  [TIMING] patterns: DETECT START
  [TIMING] patterns: DETECT END duration=3ms
"""

import logging
import time
from contextlib import asynccontextmanager, contextmanager

logger = logging.getLogger(__name__)


def _since(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@contextmanager
def sync_timer(node_name: str, action: str):
    logger.info("[TIMING] %s: %s START", node_name, action)
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.info("[TIMING] %s: %s END duration=%.0fms", node_name, action, _since(start))


@asynccontextmanager
async def async_timer(node_name: str, action: str):
    with sync_timer(node_name, action):
        yield


class StepTimer:
    """Named step durations (ms) for one extraction run; ``summary()`` logs the total."""

    def __init__(self, node_name: str):
        self.node_name = node_name
        self.steps: dict[str, float] = {}
        self._started = time.perf_counter()

    @contextmanager
    def step(self, step_name: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.steps[step_name] = _since(start)
            logger.info("[TIMING] %s: %s duration=%.0fms", self.node_name, step_name, self.steps[step_name])

    @asynccontextmanager
    async def async_step(self, step_name: str):
        with self.step(step_name):
            yield

    def summary(self) -> float:
        total = _since(self._started)
        logger.info("[TIMING] %s: TOTAL duration=%.0fms", self.node_name, total)
        return total
