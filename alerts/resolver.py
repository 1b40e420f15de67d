"""Group name → alertee expansion."""
import logging

from alerts.exceptions import ConfigError

logger = logging.getLogger("alertinator.alerts.resolver")


class AlerteeResolver:
    def __init__(self, groups, alertees=None):
        self.groups = {name: tuple(members or ()) for name, members in groups.items()}
        self.alertees = alertees or {}

    def resolve(self, group_names):
        """Union of the named groups' members, deduplicated in first-seen order."""
        seen = []
        for group in group_names:
            if group not in self.groups:
                raise ConfigError(f"Unknown alertee group: {group}")
            for member in self.groups[group]:
                if member not in seen:
                    seen.append(member)
        return seen

    def resolve_alertees(self, group_names):
        """Like ``resolve`` but returns ``Alertee`` objects."""
        result = []
        for name in self.resolve(group_names):
            try:
                result.append(self.alertees[name])
            except KeyError:
                raise ConfigError(f"Unknown alertee: {name}") from None
        return result
