"""Failures raised by temporary job helpers."""
from __future__ import annotations

from typing import List, Tuple


class ImageInfoError(AssertionError):
    """Image descriptor could not be loaded; aborts the calling test."""

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source


class TeardownError(RuntimeError):
    """One or more deployed jobs failed to undeploy."""

    def __init__(self, failures: List[Tuple[object, BaseException]]) -> None:
        summary = "; ".join(f"{job}: {exc}" for job, exc in failures)
        super().__init__(f"Failed to undeploy {len(failures)} job(s): {summary}")
        self.failures = failures
