"""Exceptions raised by checks, the event store, channels and config loading."""
from models.enums import Severity


class AlertinatorError(Exception):
    """Base class for every error the alerting system raises itself."""


class CheckFailure(AlertinatorError):
    """Raised by a check to report that it failed at a known severity.

    Checks signal failure with this exception only; anything else a check
    raises is treated as a bug in the check and escalated as a WARNING.
    """

    def __init__(self, message="", severity=Severity.CRITICAL):
        super().__init__(message)
        self.message = message
        self.severity = Severity(severity)


class StorageError(AlertinatorError):
    """The event log for a check could not be read, written or reset."""

    def __init__(self, message, check_key=None):
        super().__init__(message)
        self.check_key = check_key


class ChannelDeliveryError(AlertinatorError):
    """One or more channel dispatches failed.

    ``failures`` is a list of ``(alertee, channel, destination, error)``
    tuples. A single dispatch failure is raised with one entry.
    """

    def __init__(self, failures):
        self.failures = list(failures)
        summary = "; ".join(
            f"{alertee}/{getattr(channel, 'value', channel)} -> {destination}: {error}"
            for alertee, channel, destination, error in self.failures
        )
        super().__init__(f"{len(self.failures)} channel dispatch(es) failed: {summary}")

    @classmethod
    def merge(cls, errors):
        failures = []
        for err in errors:
            failures.extend(err.failures)
        return cls(failures)


class ConfigError(AlertinatorError):
    """Unknown group, alertee, channel or check reference in the configuration."""
