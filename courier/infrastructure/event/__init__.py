from courier.infrastructure.event.di import SweepProvider
from courier.infrastructure.event.sweeper import LedgerSweeper, ScheduleConfig, ScheduleConfigs

__all__ = ["LedgerSweeper", "ScheduleConfig", "ScheduleConfigs", "SweepProvider"]
