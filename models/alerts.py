"""Dataclasses for checks, alertees, events and notifications."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from models.enums import Channel, Severity


@dataclass(frozen=True)
class AlertEvent:
    timestamp: datetime
    status: bool  # True = success

    def to_record(self, check_key: str) -> dict:
        return {
            "ts": int(self.timestamp.timestamp()),
            "status": 1 if self.status else 0,
            "check": check_key,
        }

    @classmethod
    def from_record(cls, record: dict) -> "AlertEvent":
        return cls(
            timestamp=datetime.fromtimestamp(int(record["ts"]), tz=timezone.utc),
            status=bool(record["status"]),
        )


@dataclass(frozen=True)
class ThresholdConfig:
    alert_after: int = 0
    clear_after: int = 0
    remind_every: Optional[int] = None
    groups: tuple = ()

    def __post_init__(self):
        for name in ("alert_after", "clear_after"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        remind = self.alert_after if self.remind_every is None else self.remind_every
        object.__setattr__(self, "remind_every", max(int(remind), 1))
        object.__setattr__(self, "groups", tuple(self.groups))


@dataclass(frozen=True)
class ContactMethod:
    channel: Channel
    destination: str
    mask: Severity = Severity.ALL

    def accepts(self, severity: Severity) -> bool:
        return bool(severity & self.mask)


@dataclass(frozen=True)
class Alertee:
    name: str
    methods: tuple = ()

    def __post_init__(self):
        channels = [m.channel for m in self.methods]
        if len(channels) != len(set(channels)):
            raise ValueError(f"Alertee {self.name} lists a channel more than once")


@dataclass(frozen=True)
class CheckEntry:
    key: str
    func: Callable
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)


@dataclass(frozen=True)
class Notification:
    check: str
    severity: Severity
    message: str
    text_prefix: str = ""

    def text_for(self, channel: Channel) -> str:
        """Voice calls get the bare message; text channels get the prefix too."""
        if channel.is_voice:
            return self.message
        return self.text_prefix + self.message


# ── Check outcomes ──────────────────────────────────

@dataclass(frozen=True)
class Success:
    pass


@dataclass(frozen=True)
class Failure:
    severity: Severity
    message: str


@dataclass(frozen=True)
class InternalError:
    message: str
    error: BaseException = None
