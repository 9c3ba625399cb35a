# File: tests/fixtures.py
"""
Shared test helpers for AlkeParking tests
"""

from datetime import datetime, timedelta


START_TIME = datetime(2024, 1, 15, 9, 0, 0)


class FakeClock:
    """Controllable clock; call it to read the time, advance() to move it"""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int = 0, seconds: int = 0) -> datetime:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
        return self.now
