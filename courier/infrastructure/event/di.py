"""Dependency injection provider for the sweep scheduler."""

import logging

from dishka import AsyncContainer, provide

from courier.config import Config
from courier.domain.publication.schedule import PruneSchedule, ResubmitSchedule
from courier.infrastructure.event.sweeper import LedgerSweeper, ScheduleConfig, ScheduleConfigs
from courier.util.di.base import Provider
from courier.util.di.scope import Scope

logger = logging.getLogger(__name__)


def build_schedule_configs(config: Config) -> ScheduleConfigs:
    """Build schedule configs from the ledger section of the application config."""
    configs: list[ScheduleConfig] = []

    resubmit = config.ledger.resubmit
    if resubmit is not None:
        configs.append(
            ScheduleConfig(
                schedule_type=ResubmitSchedule,
                cron=resubmit.cron,
                id="ledger-resubmit",
                params={
                    "older_than_seconds": resubmit.older_than_seconds,
                    "handler_ids": resubmit.handler_ids,
                },
            )
        )

    prune = config.ledger.prune
    if prune is not None:
        configs.append(
            ScheduleConfig(
                schedule_type=PruneSchedule,
                cron=prune.cron,
                id="ledger-prune",
                params={"completed_older_than_seconds": prune.completed_older_than_seconds},
            )
        )

    return ScheduleConfigs(configs)


class SweepProvider(Provider):
    """Provides the APP-scoped LedgerSweeper and its schedules."""

    @provide(scope=Scope.APP)
    def get_schedule_configs(self, config: Config) -> ScheduleConfigs:
        return build_schedule_configs(config)

    @provide(scope=Scope.APP)
    def get_sweeper(
        self,
        container: AsyncContainer,
        schedules: ScheduleConfigs,
        config: Config,
    ) -> LedgerSweeper:
        sweeper = LedgerSweeper(
            container,
            schedules,
            republish_on_startup=config.ledger.republish_outstanding_on_startup,
        )
        logger.info(f"LedgerSweeper created with {len(schedules)} schedules")
        return sweeper
