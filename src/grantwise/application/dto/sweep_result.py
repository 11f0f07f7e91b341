"""Expired-entry sweep result DTO."""

from dataclasses import dataclass


@dataclass
class SweepResult:
    """Counts removed by SweepExpiredUseCase."""

    users_updated: int = 0
    grants_removed: int = 0
    overrides_removed: int = 0
