"""Runtime context: one explicitly constructed set of services per process.

Build it once at start-up with ``build_runtime()`` and pass it to whatever
handles commands; nothing in the package holds a global engine.
"""
from __future__ import annotations

from dataclasses import dataclass

import structlog

from foodflow.core.config import Settings
from foodflow.core.logging import configure_logging
from foodflow.modules.haccp.application.haccp_service import HACCPService
from foodflow.modules.process.application.process_engine import ProcessEngine
from foodflow.modules.traceability.application.lot_tracking_service import LOTTrackingService

logger = structlog.get_logger(__name__)


@dataclass
class FoodProcessRuntime:
    settings: Settings
    engine: ProcessEngine
    haccp: HACCPService
    lots: LOTTrackingService

    def clear(self) -> None:
        self.engine.clear()
        self.haccp.clear()
        self.lots.clear()
        logger.info("runtime_cleared")


def build_runtime(settings: Settings | None = None, configure: bool = True) -> FoodProcessRuntime:
    settings = settings or Settings()
    if configure:
        configure_logging(settings.ENVIRONMENT, settings.LOG_LEVEL)
    runtime = FoodProcessRuntime(
        settings=settings,
        engine=ProcessEngine(settings),
        haccp=HACCPService(settings),
        lots=LOTTrackingService(settings),
    )
    logger.info(
        "runtime_started",
        project=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        strict_transitions=settings.STRICT_TRANSITIONS,
        lot_sequence_strategy=settings.LOT_SEQUENCE_STRATEGY,
    )
    return runtime
