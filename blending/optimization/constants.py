"""Centralized constants for the blend optimization model.

This module contains the numeric thresholds, scaling factors and retry
limits shared by the model builder, result extraction and the relaxation
loop.
"""

# ============================================================================
# INPUT FILTERING
# ============================================================================

#: Batches with stock at or below this weight (kg) are dropped before modeling
MIN_USABLE_STOCK_KG = 0.1


# ============================================================================
# MODEL CONSTANTS
# ============================================================================

#: Factor applied to every objective coefficient.
#: Keeps coefficient magnitudes near 1 for branch-and-bound regardless of
#: currency units (prices are in the 100k VND range)
OBJECTIVE_SCALE = 1e-3

#: Hard cap on caffeine deviation, independent of mode and profile
CAFFEINE_HARD_TOLERANCE = 0.5

#: Default MIP relative gap handed to the solver
DEFAULT_MIP_GAP = 1e-6


# ============================================================================
# RESULT EXTRACTION
# ============================================================================

#: Fractions at or below this value are solver noise and reported as zero
FRACTION_ZERO_THRESHOLD = 1e-4

#: Upper bound of the similarity score
MAX_SIMILARITY_SCORE = 100.0


# ============================================================================
# RELAXATION LOOP
# ============================================================================

#: Maximum number of relaxed re-solves after the first attempt
MAX_RETRIES = 3

#: A feasible blend is accepted when its price is within this factor of target
PRICE_ACCEPTANCE_FACTOR = 1.10


# ============================================================================
# STATUS CODES
# ============================================================================

STATUS_OPTIMAL = "OPTIMAL"
STATUS_FEASIBLE = "FEASIBLE"
STATUS_INFEASIBLE = "INFEASIBLE"
STATUS_UNBOUNDED = "UNBOUNDED"
STATUS_TIMEOUT = "TIMEOUT"
STATUS_UNKNOWN = "UNKNOWN"
STATUS_OUT_OF_STOCK = "OUT_OF_STOCK"
STATUS_SOLVER_NOT_FOUND = "SOLVER_NOT_FOUND"

#: Statuses no amount of parameter relaxation can fix
TERMINAL_STATUSES = frozenset({STATUS_OUT_OF_STOCK, STATUS_SOLVER_NOT_FOUND})
