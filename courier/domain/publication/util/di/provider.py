from dishka import from_context, provide

from courier.domain.publication.model.registry import HandlerRegistry
from courier.domain.publication.schedule import PruneSchedule, ResubmitSchedule
from courier.domain.publication.service.dispatcher import Dispatcher
from courier.domain.publication.service.ledger import Ledger
from courier.domain.publication.service.resubmission import ResubmissionEngine
from courier.domain.shared.clock import Clock, SystemClock
from courier.util.di.base import Provider
from courier.util.di.scope import Scope


class LedgerProvider(Provider):
    """Provides the ledger, the resubmission engine and the dispatcher.

    The handler registry is built by the host application and passed into
    the container as context. Schedules are UOW-scoped (fresh per sweep).
    """

    registry = from_context(provides=HandlerRegistry, scope=Scope.APP)

    clock = provide(SystemClock, provides=Clock, scope=Scope.APP)

    ledger = provide(Ledger, scope=Scope.APP)
    engine = provide(ResubmissionEngine, scope=Scope.APP)
    dispatcher = provide(Dispatcher, scope=Scope.APP)

    resubmit_schedule = provide(ResubmitSchedule, scope=Scope.UOW)
    prune_schedule = provide(PruneSchedule, scope=Scope.UOW)
