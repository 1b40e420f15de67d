"""Per-alertee dispatch with severity-mask filtering."""
import logging

from alerts.exceptions import ChannelDeliveryError, ConfigError

logger = logging.getLogger("alertinator.alerts.notifier")


class Notifier:
    """Sends a Notification to alertees through the injected capabilities.

    ``capabilities`` maps each Channel to a ``send(destination, message)``
    callable. A failing dispatch is logged and collected; the remaining
    dispatches still go out, and a single ChannelDeliveryError listing every
    failure is raised at the end.
    """

    def __init__(self, capabilities):
        self.capabilities = dict(capabilities)

    def notify(self, alertee, notification):
        """Returns the number of dispatches made."""
        failures = []
        sent = 0
        for method in alertee.methods:
            if not method.accepts(notification.severity):
                continue
            send = self.capabilities.get(method.channel)
            if send is None:
                raise ConfigError(f"No capability bound for channel {method.channel.value}")
            message = notification.text_for(method.channel)
            try:
                send(method.destination, message)
                sent += 1
                logger.debug(f"Sent {notification.check} to {alertee.name} via {method.channel.value}")
            except Exception as e:
                logger.warning(
                    f"Dispatch to {alertee.name} via {method.channel.value} "
                    f"({method.destination}) failed: {e}"
                )
                failures.append((alertee.name, method.channel, method.destination, e))
        if failures:
            raise ChannelDeliveryError(failures)
        return sent

    def notify_all(self, alertees, notification):
        errors = []
        sent = 0
        for alertee in alertees:
            try:
                sent += self.notify(alertee, notification)
            except ChannelDeliveryError as e:
                errors.append(e)
        if errors:
            raise ChannelDeliveryError.merge(errors)
        return sent
