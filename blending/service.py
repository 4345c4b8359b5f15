"""Request front door for blend optimization.

Validates a blend request, picks the engine for its algorithm selector and
returns the engine's BlendingResult. Request problems raise
InvalidInputError before any model is built; solver outcomes never raise.
"""

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidInputError
from .models.batch import CoffeeBatch
from .models.params import OptimizerParams
from .models.target import BlendingTarget
from .optimization.engine import OptimizerAlgorithm, create_engine
from .optimization.result_schema import BlendingResult
from .optimization.solver_config import SolverConfig

logger = logging.getLogger(__name__)


class BlendingRequest(BaseModel):
    """A blend request as received from a caller."""
    batches: List[CoffeeBatch] = Field(default_factory=list, description="Candidate batches")
    target: Optional[BlendingTarget] = Field(default=None, description="Blend target profile")
    params: Optional[OptimizerParams] = Field(
        default=None,
        description="Optimizer parameters (None = profile for the target mode)"
    )
    algorithm: OptimizerAlgorithm = Field(
        default=OptimizerAlgorithm.DEFAULT,
        description="DEFAULT (single solve) or HYBRID (smart retry)"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator('algorithm', mode='before')
    @classmethod
    def parse_algorithm(cls, v):
        return OptimizerAlgorithm.parse(v)


def validate_request(batches: Optional[Sequence[CoffeeBatch]], target: Optional[BlendingTarget]) -> None:
    """
    Reject requests that cannot be optimized.

    Raises:
        InvalidInputError: If batches are missing or empty, the target is
            missing, or batch ids repeat
    """
    if not batches:
        raise InvalidInputError("Input batches cannot be empty")
    if target is None:
        raise InvalidInputError("Blending target is required")

    seen = set()
    duplicates = []
    for batch in batches:
        if batch.id in seen and batch.id not in duplicates:
            duplicates.append(batch.id)
        seen.add(batch.id)
    if duplicates:
        raise InvalidInputError(
            "Batch ids must be unique",
            context={'duplicate_ids': duplicates, 'num_batches': len(batches)},
        )


class BlendingService:
    """
    Entry point used by callers.

    Example:
        service = BlendingService()
        result = service.optimize_blend(batches, target, algorithm="HYBRID")
    """

    def __init__(self, solver_config: Optional[SolverConfig] = None):
        self.solver_config = solver_config

    def optimize_blend(
        self,
        batches: Sequence[CoffeeBatch],
        target: BlendingTarget,
        params: Optional[OptimizerParams] = None,
        algorithm=OptimizerAlgorithm.DEFAULT,
    ) -> BlendingResult:
        """
        Optimize a blend.

        Args:
            batches: Candidate batches
            target: Blend target profile
            params: Optimizer parameters (None = profile for the target mode)
            algorithm: "DEFAULT" or "HYBRID", case-insensitive

        Returns:
            BlendingResult

        Raises:
            InvalidInputError: If the request is rejected
        """
        validate_request(batches, target)

        selected = OptimizerAlgorithm.parse(algorithm)
        logger.info(
            f"Blend request: {len(batches)} batches, mode {target.mode.value}, "
            f"{target.total_output_kg:g} kg, algorithm {selected.value}"
        )

        engine = create_engine(selected, self.solver_config)
        result = engine.optimize(list(batches), target, params)

        logger.info(str(result))
        return result

    def handle(self, request: BlendingRequest) -> BlendingResult:
        """Optimize a validated BlendingRequest."""
        return self.optimize_blend(
            request.batches,
            request.target,
            params=request.params,
            algorithm=request.algorithm,
        )


def optimize_blend(
    batches: Sequence[CoffeeBatch],
    target: BlendingTarget,
    params: Optional[OptimizerParams] = None,
    algorithm=OptimizerAlgorithm.DEFAULT,
    solver_config: Optional[SolverConfig] = None,
) -> BlendingResult:
    """Optimize a blend with a one-off BlendingService."""
    return BlendingService(solver_config).optimize_blend(batches, target, params, algorithm)
