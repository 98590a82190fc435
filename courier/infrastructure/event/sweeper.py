"""LedgerSweeper - runs resubmission and prune sweeps on cron schedules."""

import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, NewType

from apscheduler import AsyncScheduler
from apscheduler.triggers.cron import CronTrigger
from dishka import AsyncContainer

from courier.domain.publication.service.resubmission import ResubmissionEngine
from courier.domain.shared.schedule import Schedule
from courier.util.di.scope import Scope

logger = logging.getLogger(__name__)

# Consecutive failures after which a schedule is reported as critical
FAILURE_ALERT_THRESHOLD = 5


@dataclass
class ScheduleConfig:
    """Configuration for a scheduled sweep."""

    schedule_type: type[Schedule]
    cron: str
    id: str
    params: dict[str, Any] = field(default_factory=dict)


ScheduleConfigs = NewType("ScheduleConfigs", list[ScheduleConfig])


class LedgerSweeper:
    """Runs the ledger's periodic sweeps.

    The core exposes resubmission and pruning as plain callables; this is
    the optional timer around them. Each run happens in its own UOW scope,
    and a failing run is logged and counted without stopping the scheduler.

    Usage:
        sweeper = await container.get(LedgerSweeper)
        async with sweeper:
            await serve_forever()
    """

    def __init__(
        self,
        container: AsyncContainer,
        schedules: ScheduleConfigs | None = None,
        republish_on_startup: bool = False,
    ) -> None:
        self._container = container
        self._schedules = schedules or ScheduleConfigs([])
        self._republish_on_startup = republish_on_startup
        self._scheduler: AsyncScheduler | None = None
        self._exit_stack: AsyncExitStack | None = None
        self._schedule_failures: dict[str, int] = {}

    @property
    def schedules(self) -> ScheduleConfigs:
        return self._schedules

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    async def start(self) -> None:
        """Republish outstanding publications if configured, then start the cron schedules."""
        if self._republish_on_startup:
            await self._republish_outstanding()

        self._exit_stack = AsyncExitStack()
        await self._exit_stack.__aenter__()

        self._scheduler = AsyncScheduler()
        await self._exit_stack.enter_async_context(self._scheduler)

        for config in self._schedules:
            await self._scheduler.add_schedule(
                self.run_schedule,
                CronTrigger.from_crontab(config.cron),
                id=config.id,
                kwargs={"config": config},
            )
            logger.debug(f"Registered schedule {config.id} (cron={config.cron})")

        await self._scheduler.start_in_background()
        logger.info(f"LedgerSweeper started with {len(self._schedules)} schedules")

    async def stop(self) -> None:
        if self._exit_stack:
            await self._exit_stack.__aexit__(None, None, None)
            self._exit_stack = None
        self._scheduler = None
        logger.info("LedgerSweeper stopped")

    async def run_schedule(self, config: ScheduleConfig) -> None:
        """Run one sweep in its own UOW scope."""
        try:
            async with self._container(scope=Scope.UOW) as scope:
                schedule = await scope.get(config.schedule_type)
                await schedule.run(**config.params)

            # Reset failure counter on success
            self._schedule_failures.pop(config.id, None)
            logger.debug(f"Ran schedule {config.id}")

        except Exception as e:
            failures = self._schedule_failures.get(config.id, 0) + 1
            self._schedule_failures[config.id] = failures
            logger.error(f"Failed to run schedule {config.id} (failures: {failures}): {e}")
            if failures >= FAILURE_ALERT_THRESHOLD:
                logger.critical(f"Schedule {config.id} has failed {failures} consecutive times")

    def failures(self, schedule_id: str) -> int:
        return self._schedule_failures.get(schedule_id, 0)

    async def _republish_outstanding(self) -> None:
        """Replay every incomplete publication once (crash recovery at startup)."""
        try:
            engine = await self._container.get(ResubmissionEngine)
            report = await engine.resubmit()
            logger.info(f"Republished outstanding publications on startup: {report}")
        except Exception as e:
            logger.error(f"Republishing outstanding publications on startup failed: {e}")

    async def __aenter__(self) -> "LedgerSweeper":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()
