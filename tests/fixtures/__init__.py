"""Test fixtures for blend model testing."""

from .solver_mocks import create_mock_solver_config, create_missing_solver_config

__all__ = ['create_mock_solver_config', 'create_missing_solver_config']
