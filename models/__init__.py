"""Data models."""
from models.enums import Severity, Channel
from models.alerts import (
    AlertEvent, ThresholdConfig, ContactMethod, Alertee, CheckEntry, Notification,
    Success, Failure, InternalError,
)
