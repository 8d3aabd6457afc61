"""Exceptions raised by swrlkit.

Only construction and loading problems are signalled with exceptions.
Evaluation never raises for data-dependent mismatches: those rows are
simply dropped from the binding table.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "SwrlError",
    "RuleConstructionError",
    "KnowledgeModuleError",
]


class SwrlError(Exception):
    """Base exception for all swrlkit errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RuleConstructionError(SwrlError, ValueError):
    """Raised when an atom, built-in or rule is built with invalid parts."""

    def __init__(self, component: str, parameter: str, reason: str = "is null") -> None:
        message = f'Cannot create {component} because given "{parameter}" parameter {reason}'
        super().__init__(message, {"component": component, "parameter": parameter})
        self.component = component
        self.parameter = parameter


class KnowledgeModuleError(SwrlError, ValueError):
    """Raised when a knowledge module cannot be found or parsed."""

    def __init__(self, module: str, reason: str = "") -> None:
        message = f"Cannot load knowledge module '{module}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"module": module, "reason": reason})
        self.module = module
