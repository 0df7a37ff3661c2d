"""
Review Service Factory
Centralizes the wiring of engine, clock and recorder.
"""

from retain.application.config import EngineConfig, resolve_config
from retain.application.review_service import ReviewService
from retain.application.scheduler import SchedulingEngine
from retain.domain.ports import Clock
from retain.infrastructure.clock import SystemClock


def get_review_service(
    config: EngineConfig | None = None,
    clock: Clock | None = None,
) -> ReviewService:
    """
    Returns a ReviewService for the given config, defaulting to the resolved
    configuration and the system clock.
    """
    if config is None:
        config = resolve_config()
    if clock is None:
        clock = SystemClock()
    return ReviewService(engine=SchedulingEngine(config), clock=clock)
