"""
Shared test configuration.

Security settings must be in the environment before passvault.dependencies
is imported, so they are set at module import time here.
"""

import os

os.environ["MASTER_PASSWORD"] = "correct horse battery staple"
os.environ["JWT_SECRET"] = "test-signing-secret"
os.environ["ENCRYPTION_KEY"] = "test-encryption-passphrase"
os.environ["SESSION_DURATION"] = "1800"
os.environ["RECORD_STORE"] = "memory"
os.environ["LOG_JSON"] = "false"

import pytest


class FakeClock:
    """Controllable replacement for time.time"""

    def __init__(self, now: float = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def master_password():
    return os.environ["MASTER_PASSWORD"]
