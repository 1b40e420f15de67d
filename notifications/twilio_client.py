"""Twilio REST client for SMS and text-to-speech calls.

Uses raw HTTP POST via requests, no Twilio SDK needed.
"""
import logging
from urllib.parse import quote
from xml.sax.saxutils import escape

import requests

logger = logging.getLogger("alertinator.notifications.twilio")

TWILIO_API = "https://api.twilio.com/2010-04-01/Accounts/{sid}"
TWIMLET_ECHO = "http://twimlets.com/echo?Twiml="


class TwilioError(Exception):
    """Twilio request error with status code and response body."""
    def __init__(self, message, status_code=None, response_body=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


def build_twiml(message: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<Response><Say>{escape(message)}</Say></Response>"
    )


def twiml_url(message: str) -> str:
    """Twilio fetches call instructions from a URL, so echo the TwiML through a twimlet."""
    return TWIMLET_ECHO + quote(build_twiml(message), safe="")


class TwilioClient:
    """Thin wrapper around the Messages and Calls resources."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str, timeout: int = 30):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.base_url = TWILIO_API.format(sid=account_sid)

    @classmethod
    def from_config(cls, config: dict):
        tw = config.get("twilio", {})
        return cls(
            account_sid=tw.get("account_sid", ""),
            auth_token=tw.get("auth_token", ""),
            from_number=tw.get("from_number", ""),
            timeout=tw.get("timeout", 30),
        )

    def is_configured(self) -> bool:
        return all([self.account_sid, self.auth_token, self.from_number])

    # ── core API ─────────────────────────────────────

    def _post(self, resource: str, data: dict) -> dict:
        if not self.is_configured():
            raise TwilioError("Twilio not configured: account_sid, auth_token and from_number are required")
        url = f"{self.base_url}/{resource}.json"
        try:
            resp = requests.post(url, data=data, auth=(self.account_sid, self.auth_token),
                                 timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Twilio request failed: %s", e)
            raise TwilioError(f"Twilio request failed: {e}") from e
        if resp.status_code >= 400:
            raise TwilioError(
                f"HTTP {resp.status_code} from Twilio {resource}",
                status_code=resp.status_code,
                response_body=resp.text,
            )
        return resp.json()

    def send_sms(self, number: str, message: str) -> dict:
        """Send ``message`` as an SMS to ``number``.

        SMS goes out to the number as configured; only calls need the
        country code prepended.
        """
        logger.info("Sending SMS to %s", number)
        return self._post("Messages", {
            "From": self.from_number,
            "To": number,
            "Body": message,
        })

    def place_call(self, number: str, message: str) -> dict:
        """Call ``+1<number>`` and read ``message`` with text-to-speech."""
        number = "+1" + number
        logger.info("Placing call to %s", number)
        return self._post("Calls", {
            "From": self.from_number,
            "To": number,
            "Url": twiml_url(message),
        })
