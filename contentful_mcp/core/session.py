from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SessionState:
    """Mutable per-instance session flags. Reset when the instance stops."""

    initial_context_loaded: bool = False

    def mark_initial_context_loaded(self) -> None:
        self.initial_context_loaded = True

    def reset(self) -> None:
        self.initial_context_loaded = False
