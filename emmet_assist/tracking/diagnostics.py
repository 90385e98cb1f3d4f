from __future__ import annotations

import time


class StageTimer:
    """Collects per-stage durations of a single completion request."""

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._last = self._start
        self._messages: list[str] = []

    def mark(self, label: str) -> None:
        now = time.perf_counter()
        self._messages.append(f"{label}: {(now - self._last) * 1000:.2f}ms")
        self._last = now

    @property
    def stages(self) -> list[str]:
        return list(self._messages)

    def dump(self) -> str:
        total = (time.perf_counter() - self._start) * 1000
        return "\n".join([*self._messages, f"Total time: {total:.2f}ms"])
