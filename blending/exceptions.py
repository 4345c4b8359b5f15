"""Exceptions raised by the blend optimizer.

Only request-level problems are exceptions. Solver outcomes (infeasible,
timeout, missing solver, out of stock) are reported as non-feasible
BlendingResult statuses instead.
"""

from typing import Any, Dict, Optional


class BlendingError(Exception):
    """Base exception with optional context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with context."""
        msg = self.message
        if self.context:
            msg += "\n\nContext:"
            for key, value in self.context.items():
                msg += f"\n  {key}: {value}"
        return msg


class InvalidInputError(BlendingError):
    """Raised when a request is rejected before any model is built."""
    pass
