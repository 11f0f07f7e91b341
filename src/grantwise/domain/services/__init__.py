"""Pure domain services."""

from grantwise.domain.services.context_evaluator import applies

__all__ = ["applies"]
