"""Sample checks showing how to report failures.

A check is any zero-argument callable. Returning normally means success;
raising CheckFailure reports a failure at the given severity. Any other
exception is treated as a bug in the check.
"""
import shutil

import requests

from alerts.exceptions import CheckFailure
from models.enums import Severity

DISK_PATH = "/"
DISK_WARN_PCT = 85
DISK_CRITICAL_PCT = 95

WEBSITE_URL = "https://example.com/"


def disk_space():
    usage = shutil.disk_usage(DISK_PATH)
    used_pct = usage.used / usage.total * 100
    if used_pct >= DISK_CRITICAL_PCT:
        raise CheckFailure(f"Disk {DISK_PATH} is {used_pct:.0f}% full", Severity.CRITICAL)
    if used_pct >= DISK_WARN_PCT:
        raise CheckFailure(f"Disk {DISK_PATH} is {used_pct:.0f}% full", Severity.WARNING)


def website_up():
    try:
        resp = requests.get(WEBSITE_URL, timeout=10)
    except requests.RequestException as e:
        raise CheckFailure(f"{WEBSITE_URL} unreachable: {e}", Severity.CRITICAL) from e
    if resp.status_code >= 500:
        raise CheckFailure(f"{WEBSITE_URL} returned HTTP {resp.status_code}", Severity.CRITICAL)
    if resp.status_code >= 400:
        raise CheckFailure(f"{WEBSITE_URL} returned HTTP {resp.status_code}", Severity.NOTICE)
