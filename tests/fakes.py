# tests/fakes.py

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

# 2024-01-01 is a Monday.
MONDAY = dt.date(2024, 1, 1)


@dataclass(slots=True)
class FakeClock:
    """
    Settable clock for TaskStore.

    Tests move it across day boundaries instead of waiting for midnight.
    """

    day: dt.date = MONDAY

    def __call__(self) -> dt.date:
        return self.day

    def advance(self, days: int = 1) -> dt.date:
        self.day = self.day + dt.timedelta(days=days)
        return self.day


def type_text(machine, text: str) -> None:
    """Feed each character of text as a key event."""
    for ch in text:
        machine.handle_key(ch)
