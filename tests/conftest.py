"""Shared test fixtures."""
import os
import sys
import pytest
from datetime import datetime, timedelta, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.enums import Channel
from models.event_store import MemoryEventStore


class RecordingChannel:
    """Capability that records every dispatch as (channel, destination, message)."""

    def __init__(self, channel, sent, fail=False):
        self.channel = channel
        self.sent = sent
        self.fail = fail

    def __call__(self, destination, message):
        if self.fail:
            raise RuntimeError(f"{self.channel.value} is down")
        self.sent.append((self.channel.value, destination, message))


class Clock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def store():
    return MemoryEventStore()


@pytest.fixture
def sent():
    return []


@pytest.fixture
def capabilities(sent):
    return {channel: RecordingChannel(channel, sent) for channel in Channel}


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def sample_config():
    return {
        "groups": {"default": ["alice"], "ops": ["alice", "bob"]},
        "alertees": {
            "alice": {"email": ["alice@example.com", 4]},
            "bob": {
                "sms": ["5555550101", "warning|critical"],
                "call": ["5555550102", "critical"],
            },
        },
    }
