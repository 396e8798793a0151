"""
PDFMaster — Pipeline step logger with duration tracking.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("pdfmaster")


@dataclass
class StepClock:
    """Elapsed time of a step, filled in when the step exits."""

    name: str
    elapsed_ms: float = 0.0
    failed: bool = False


@contextmanager
def step_timer(step_name: str) -> Generator[StepClock, None, None]:
    """Log the start and duration of a pipeline step and expose its timing."""
    clock = StepClock(step_name)
    logger.info("▶ %s — started", step_name)
    start = time.perf_counter()
    try:
        yield clock
    except BaseException:
        clock.failed = True
        raise
    finally:
        clock.elapsed_ms = (time.perf_counter() - start) * 1000
        if clock.failed:
            logger.info("✗ %s — failed after %.0f ms", step_name, clock.elapsed_ms)
        else:
            logger.info("✔ %s — completed in %.0f ms", step_name, clock.elapsed_ms)
