"""Tests for the SMTP email sender."""
import smtplib
import pytest
from unittest.mock import patch, MagicMock

from notifications.email_sender import EmailSender


def _config(**overrides):
    email = {
        "smtp_host": "smtp.test.com",
        "smtp_port": 587,
        "use_tls": True,
        "from_address": "alerts@test.com",
        "smtp_username": "user",
        "smtp_password": "pass",
    }
    email.update(overrides)
    return {"email": email}


def _mock_smtp(mock_smtp_class):
    mock_server = MagicMock()
    mock_smtp_class.return_value = mock_server
    mock_server.__enter__ = MagicMock(return_value=mock_server)
    mock_server.__exit__ = MagicMock(return_value=False)
    return mock_server


class TestEmailSender:
    def test_defaults_target_local_relay(self):
        sender = EmailSender({"email": {}})
        assert (sender.smtp_host, sender.smtp_port, sender.use_tls) == ("localhost", 25, False)
        assert sender.subject == "Alert"
        assert sender.is_configured() is False

    def test_env_vars_override_config(self):
        with patch.dict("os.environ", {
            "ALERTINATOR_SMTP_USER": "env_user",
            "ALERTINATOR_SMTP_PASS": "env_pass",
        }):
            sender = EmailSender(_config())
            assert sender.username == "env_user"
            assert sender.password == "env_pass"

    def test_send_raises_when_not_configured(self):
        sender = EmailSender({"email": {}})
        with pytest.raises(RuntimeError):
            sender.send("bob@example.com", "hello")

    @patch("notifications.email_sender.smtplib.SMTP")
    def test_send_success(self, mock_smtp_class):
        mock_server = _mock_smtp(mock_smtp_class)
        with patch.dict("os.environ", {}, clear=True):
            sender = EmailSender(_config(subject="Pager"))
            sender.send("bob@example.com", "Threshold of 3 reached:\nfoobaz")

        mock_smtp_class.assert_called_once_with("smtp.test.com", 587, timeout=30)
        mock_server.starttls.assert_called_once()
        mock_server.login.assert_called_once_with("user", "pass")
        msg = mock_server.send_message.call_args[0][0]
        assert msg["To"] == "bob@example.com"
        assert msg["Subject"] == "Pager"
        assert "foobaz" in msg.get_payload(decode=True).decode()

    @patch("notifications.email_sender.smtplib.SMTP")
    def test_no_login_without_credentials(self, mock_smtp_class):
        mock_server = _mock_smtp(mock_smtp_class)
        with patch.dict("os.environ", {}, clear=True):
            sender = EmailSender(_config(smtp_username="", smtp_password="", use_tls=False))
            sender.send("bob@example.com", "hi")
        mock_server.login.assert_not_called()
        mock_server.starttls.assert_not_called()
        mock_server.send_message.assert_called_once()

    @patch("notifications.email_sender.smtplib.SMTP")
    def test_auth_failure_propagates(self, mock_smtp_class):
        mock_server = _mock_smtp(mock_smtp_class)
        mock_server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"nope")
        with patch.dict("os.environ", {}, clear=True):
            sender = EmailSender(_config())
            with pytest.raises(smtplib.SMTPAuthenticationError):
                sender.send("bob@example.com", "hi")
        mock_server.close.assert_called_once()



def test_sender_exposes_only_send():
    assert not hasattr(EmailSender, "test_connection")
    assert callable(EmailSender.send)
