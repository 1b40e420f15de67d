"""Channel capabilities: one ``send(destination, message)`` callable per Channel."""
import logging

from models.enums import Channel

logger = logging.getLogger("alertinator.alerts.channels")


class ConsoleChannel:
    """Print dispatches to the terminal instead of delivering them (dry runs)."""

    def __init__(self, channel, console=None):
        self.channel = channel
        self._console = console

    def _get_console(self):
        if self._console is None:
            from rich.console import Console
            self._console = Console()
        return self._console

    def __call__(self, destination, message):
        style = "bold magenta" if self.channel is Channel.CALL else "bold cyan"
        self._get_console().print(
            f"[{style}]\\[{self.channel.value}][/] {destination}: {message}",
            highlight=False,
        )


def console_capabilities(console=None):
    return {channel: ConsoleChannel(channel, console) for channel in Channel}


def build_capabilities(config):
    """Dispatch table bound to the real SMTP and Twilio clients."""
    from notifications.email_sender import EmailSender
    from notifications.twilio_client import TwilioClient

    email = EmailSender(config)
    twilio = TwilioClient.from_config(config)
    if not email.is_configured():
        logger.warning("Email is not configured; email dispatches will fail")
    if not twilio.is_configured():
        logger.warning("Twilio is not configured; sms and call dispatches will fail")

    return {
        Channel.EMAIL: email.send,
        Channel.SMS: twilio.send_sms,
        Channel.CALL: twilio.place_call,
    }
