"""Data models for the coffee blend optimizer."""

from .batch import CoffeeBatch, TRACKED_ATTRIBUTES, SENSORY_ATTRIBUTES
from .target import BlendingTarget, OptimizationMode, UNTRACKED_TARGET
from .params import OptimizerParams, default_params_for_mode

__all__ = [
    # Inventory
    "CoffeeBatch",
    "TRACKED_ATTRIBUTES",
    "SENSORY_ATTRIBUTES",
    # Request profile
    "BlendingTarget",
    "OptimizationMode",
    "UNTRACKED_TARGET",
    # Tuning
    "OptimizerParams",
    "default_params_for_mode",
]
