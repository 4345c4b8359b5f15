"""Coffee blend optimizer.

Mixes roasted coffee batches into a blend that meets a target sensory
profile and price while respecting stock, batch-count limits and a
first-expired-first-out preference.
"""

__version__ = "1.0.0"

from .exceptions import BlendingError, InvalidInputError
from .models import (
    CoffeeBatch,
    BlendingTarget,
    OptimizationMode,
    OptimizerParams,
)
from .optimization import (
    BlendingResult,
    OptimizerAlgorithm,
    initialize_solvers,
)
from .service import BlendingRequest, BlendingService, optimize_blend

__all__ = [
    "__version__",
    "BlendingError",
    "InvalidInputError",
    "CoffeeBatch",
    "BlendingTarget",
    "OptimizationMode",
    "OptimizerParams",
    "BlendingResult",
    "OptimizerAlgorithm",
    "initialize_solvers",
    "BlendingRequest",
    "BlendingService",
    "optimize_blend",
]
