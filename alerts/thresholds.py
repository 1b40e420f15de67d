"""Threshold, reminder and clear evaluation.

Turns the event log of one check into a notification decision:

  - failure alert once ``alert_after`` consecutive failures are recorded
  - reminder every ``remind_every`` failures after that
  - all-clear after ``clear_after`` consecutive successes
  - silent reset when a failure streak ends before it was ever announced

Known limitation: a check that flaps faster than ``clear_after``
consecutive successes never clears, and because failures are counted from
the start of the log it can be re-alerted. The originating severity is not
kept across the log either, so clears always go out at CRITICAL.
"""
import logging
from datetime import datetime, timezone

from models.alerts import Notification
from models.enums import Severity

logger = logging.getLogger("alertinator.alerts.thresholds")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
INTERNAL_FAILURE_PREFIX = "Internal failure in check:\n"


def format_timestamp(ts):
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.strftime(TIMESTAMP_FORMAT).strip()


def count_leading_failures(events):
    """Failures from the start of the log up to the first success."""
    fails = 0
    for event in events:
        if event.status:
            break
        fails += 1
    return fails


def count_trailing_successes(events):
    """Successes from the newest event backwards up to the first failure."""
    successes = 0
    for event in reversed(events):
        if not event.status:
            break
        successes += 1
    return successes


def threshold_prefix(alert_after, remind_every, ts, reminder=False):
    prefix = f"Threshold of {alert_after} reached at {format_timestamp(ts)}"
    if reminder:
        prefix += f" (reminding every {remind_every} fails)"
    return prefix + ":\n"


def clear_message(check_key, ts):
    return f"The alert '{check_key}' was cleared at {format_timestamp(ts)}."


class ThresholdEvaluator:
    def __init__(self, store):
        self.store = store

    def on_success(self, check_key, thresholds, now=None):
        """Record a passing run. Returns an all-clear Notification or None."""
        if thresholds.clear_after == 0 or not self.store.has_failures(check_key):
            return None

        now = now or datetime.now(timezone.utc)
        self.store.append(check_key, True, now)
        return self._evaluate_clear(check_key, thresholds, now)

    def on_failure(self, check_key, thresholds, severity, message, now=None):
        """Record a declared failure. Returns a threshold/reminder Notification or None."""
        now = now or datetime.now(timezone.utc)
        self.store.append(check_key, False, now)
        return self._evaluate_failure(check_key, thresholds, Severity(severity), message, now)

    def on_internal_error(self, check_key, message):
        """A check that blows up is escalated immediately, thresholds ignored."""
        return Notification(
            check=check_key,
            severity=Severity.WARNING,
            message=INTERNAL_FAILURE_PREFIX + message,
        )

    def _evaluate_clear(self, check_key, thresholds, now):
        events = self.store.read_all(check_key)
        total = len(events)

        if count_leading_failures(events) < max(thresholds.alert_after, 1):
            # Streak ended before it was announced; nothing to take back.
            logger.info(f"{check_key}: recovered below threshold, resetting silently")
            self.store.reset(check_key)
            return None

        if total >= thresholds.clear_after:
            successes = count_trailing_successes(events)
            if successes >= thresholds.clear_after:
                logger.info(f"{check_key}: cleared after {successes} consecutive successes")
                self.store.reset(check_key)
                return Notification(
                    check=check_key,
                    severity=Severity.CRITICAL,
                    message=clear_message(check_key, now),
                )
            logger.debug(f"{check_key}: {successes}/{thresholds.clear_after} successes toward clear")
        return None

    def _evaluate_failure(self, check_key, thresholds, severity, message, now):
        events = self.store.read_all(check_key)
        fails = count_leading_failures(events)

        # alert_after == 0 alerts on the very first failure.
        alert_after = max(thresholds.alert_after, 1)
        remind_every = thresholds.remind_every

        at_threshold = fails == alert_after
        past_threshold = fails > alert_after
        remind_now = past_threshold and (fails - alert_after) % remind_every == 0

        if not (at_threshold or remind_now):
            logger.debug(f"{check_key}: failure {fails} recorded, threshold {alert_after}")
            return None

        logger.info(
            f"{check_key}: {'reminder' if remind_now else 'threshold'} alert after {fails} failures"
        )
        return Notification(
            check=check_key,
            severity=severity,
            message=message,
            text_prefix=threshold_prefix(alert_after, remind_every, now, reminder=remind_now),
        )
