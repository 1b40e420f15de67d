"""One pass over every configured check."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from alerts.exceptions import ChannelDeliveryError, CheckFailure, StorageError
from alerts.resolver import AlerteeResolver
from alerts.thresholds import ThresholdEvaluator
from models.alerts import Failure, InternalError, Success

logger = logging.getLogger("alertinator.alerts.runner")


class CheckState(str, Enum):
    OK = "ok"
    FAILING = "failing"
    ALERTED = "alerted"
    CLEARED = "cleared"
    UNKNOWN = "unknown"
    ERROR = "error"


@dataclass
class RunReport:
    states: dict = field(default_factory=dict)
    notifications: list = field(default_factory=list)
    delivery_errors: list = field(default_factory=list)

    @property
    def unknown(self):
        return [key for key, state in self.states.items() if state is CheckState.UNKNOWN]


def invoke(func):
    """Call a check and classify what happened."""
    try:
        func()
    except CheckFailure as e:
        return Failure(e.severity, e.message)
    except Exception as e:
        return InternalError(str(e), e)
    return Success()


class CheckRunner:
    def __init__(self, registry, store, notifier, clock=None):
        self.registry = registry
        self.store = store
        self.notifier = notifier
        self.evaluator = ThresholdEvaluator(store)
        self.resolver = AlerteeResolver(registry.groups, registry.alertees)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(self):
        """Run every check once.

        Internal check faults are alerted and then re-raised, ending the pass.
        Delivery failures are gathered and raised together once every check
        has been evaluated.
        """
        report = RunReport()
        for entry in self.registry:
            outcome = invoke(entry.func)

            if isinstance(outcome, InternalError):
                logger.error(f"{entry.key}: check raised {type(outcome.error).__name__}: {outcome.message}")
                notification = self.evaluator.on_internal_error(entry.key, outcome.message)
                report.states[entry.key] = CheckState.ERROR
                self._alert_groups(notification, entry.thresholds.groups, report)
                raise outcome.error

            try:
                notification = self._evaluate(entry, outcome)
                report.states[entry.key] = self._state_for(entry, outcome, notification)
            except StorageError as e:
                logger.error(f"{entry.key}: event log unavailable, state unknown: {e}")
                report.states[entry.key] = CheckState.UNKNOWN
                continue

            if notification is not None:
                self._alert_groups(notification, entry.thresholds.groups, report)

        if report.delivery_errors:
            raise ChannelDeliveryError.merge(report.delivery_errors)
        return report

    def _evaluate(self, entry, outcome):
        now = self._clock()
        if isinstance(outcome, Failure):
            logger.debug(f"{entry.key}: failed [{outcome.severity.name}] {outcome.message}")
            return self.evaluator.on_failure(
                entry.key, entry.thresholds, outcome.severity, outcome.message, now
            )
        return self.evaluator.on_success(entry.key, entry.thresholds, now)

    def _state_for(self, entry, outcome, notification):
        if isinstance(outcome, Failure):
            return CheckState.ALERTED if notification else CheckState.FAILING
        if notification is not None:
            return CheckState.CLEARED
        if self.store.has_failures(entry.key):
            return CheckState.FAILING
        return CheckState.OK

    def _alert_groups(self, notification, groups, report):
        report.notifications.append(notification)
        alertees = self.resolver.resolve_alertees(groups)
        try:
            self.notifier.notify_all(alertees, notification)
        except ChannelDeliveryError as e:
            report.delivery_errors.append(e)
