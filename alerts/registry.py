"""Check registry loading and validation."""
import importlib
import logging

from alerts.exceptions import ConfigError
from models.alerts import Alertee, CheckEntry, ContactMethod, ThresholdConfig
from models.enums import Channel, Severity

logger = logging.getLogger("alertinator.alerts.registry")

_THRESHOLD_KEYS = {
    "alert_after": "alert_after", "alertAfter": "alert_after",
    "clear_after": "clear_after", "clearAfter": "clear_after",
    "remind_every": "remind_every", "remindEvery": "remind_every",
}


def import_check(path):
    """Resolve ``package.module.func`` or ``package.module:Class.method`` to a callable."""
    if "::" in path:
        module_name, _, attr_path = path.partition("::")
    elif ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ConfigError(f"Check {path!r} is not a dotted import path")

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module for check {path}: {e}") from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError:
            raise ConfigError(f"Check {path}: {attr!r} not found") from None
    if not callable(target):
        raise ConfigError(f"Check {path} is not callable")
    return target


def parse_thresholds(check_key, raw):
    """Normalise the shorthand group list and the structured record."""
    if raw is None:
        raw = []
    if isinstance(raw, (list, tuple)):
        return ThresholdConfig(groups=tuple(raw))
    if not isinstance(raw, dict):
        raise ConfigError(f"Check {check_key}: expected a group list or a mapping")

    groups = raw.get("groups", [])
    if not isinstance(groups, (list, tuple)):
        raise ConfigError(f"Check {check_key}: groups must be a list")

    values = {}
    for key, val in raw.items():
        if key == "groups":
            continue
        if key not in _THRESHOLD_KEYS:
            logger.warning(f"Check {check_key}: ignoring unknown option {key!r}")
            continue
        try:
            values[_THRESHOLD_KEYS[key]] = int(val) if val is not None else None
        except (TypeError, ValueError):
            raise ConfigError(f"Check {check_key}: {key} must be an integer") from None
    try:
        return ThresholdConfig(groups=tuple(groups), **values)
    except ValueError as e:
        raise ConfigError(f"Check {check_key}: {e}") from e


def parse_alertee(name, raw):
    if not isinstance(raw, dict):
        raise ConfigError(f"Alertee {name}: expected a mapping of channel to [destination, mask]")
    methods = []
    for channel_name, entry in raw.items():
        try:
            channel = Channel(channel_name)
        except ValueError:
            raise ConfigError(f"Alertee {name}: unknown channel {channel_name!r}") from None
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise ConfigError(f"Alertee {name}: {channel_name} must be [destination, mask]")
        destination, mask = entry
        try:
            mask = Severity.parse(mask)
        except ValueError as e:
            raise ConfigError(f"Alertee {name}: {e}") from e
        methods.append(ContactMethod(channel, str(destination), mask))
    try:
        return Alertee(name, tuple(methods))
    except ValueError as e:
        raise ConfigError(str(e)) from e


class CheckRegistry:
    """Checks, groups and alertees loaded once and validated eagerly.

    Every group a check references and every alertee a group lists must
    exist, so the runner never hits an unknown reference mid-pass.
    """

    def __init__(self, checks=None, groups=None, alertees=None, importer=import_check):
        self.groups = {}
        self.alertees = {}
        self.entries = []
        self._importer = importer

        for name, raw in (alertees or {}).items():
            self.alertees[name] = parse_alertee(name, raw)
        for name, members in (groups or {}).items():
            if members is None:
                members = []
            if not isinstance(members, (list, tuple)):
                raise ConfigError(f"Group {name}: expected a list of alertees")
            missing = [m for m in members if m not in self.alertees]
            if missing:
                raise ConfigError(f"Group {name} references unknown alertees: {missing}")
            self.groups[name] = tuple(members)
        for key, raw in (checks or {}).items():
            self.add(key, parse_thresholds(key, raw))

        logger.info(
            f"Loaded {len(self.entries)} checks, {len(self.groups)} groups, "
            f"{len(self.alertees)} alertees"
        )

    @classmethod
    def from_config(cls, config, importer=import_check):
        return cls(
            checks=config.get("checks") or {},
            groups=config.get("groups") or {},
            alertees=config.get("alertees") or {},
            importer=importer,
        )

    def add(self, key, thresholds, func=None):
        """Register a check. ``func`` defaults to importing ``key``."""
        if any(e.key == key for e in self.entries):
            raise ConfigError(f"Duplicate check: {key}")
        missing = [g for g in thresholds.groups if g not in self.groups]
        if missing:
            raise ConfigError(f"Check {key} references unknown groups: {missing}")
        if func is None:
            func = self._importer(key)
        entry = CheckEntry(key=key, func=func, thresholds=thresholds)
        self.entries.append(entry)
        return entry

    def get(self, key):
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)
