"""Enums for alert severity and delivery channels."""
from enum import Enum, IntFlag


class Severity(IntFlag):
    NOTICE = 1    # 001
    WARNING = 2   # 010
    CRITICAL = 4  # 100
    ALL = 7       # 111

    @classmethod
    def parse(cls, value):
        """Build a mask from an int, a name, a "warning|critical" string or a list of names."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid severity mask: {value!r}")
        if isinstance(value, int):
            if value < 0 or value > cls.ALL:
                raise ValueError(f"Severity mask out of range: {value}")
            return cls(value)
        if isinstance(value, str):
            value = value.split("|")
        if isinstance(value, (list, tuple)):
            mask = cls(0)
            for name in value:
                try:
                    mask |= cls[str(name).strip().upper()]
                except KeyError:
                    raise ValueError(f"Unknown severity: {name!r}") from None
            return mask
        raise ValueError(f"Invalid severity mask: {value!r}")


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    CALL = "call"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            value = value.lower()
            if value == "voice":
                return cls.CALL
            for member in cls:
                if member.value == value:
                    return member
        return None

    @property
    def is_voice(self):
        return self is Channel.CALL
