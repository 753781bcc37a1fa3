"""Exceptions raised while scaffolding a project."""

from __future__ import annotations


class ScaffoldError(Exception):
    """Raised when a materializer stage fails irrecoverably."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        self.message = message
        super().__init__(f"{stage}: {message}")
