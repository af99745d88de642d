# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Simulation parameters for QCMPS.

This module collects the configuration values shared by circuits and simulation states: the boundary condition of
the chain and the truncation parameters used whenever an operator is contracted into the MPS. All values are
validated on construction so that an invalid configuration fails before any tensor is touched.
"""

from __future__ import annotations

from enum import Enum

from ...errors import ConfigurationError


class BoundaryCondition(Enum):
    """Enumerates the boundary conditions of the chain."""

    OPEN = "open"
    PERIODIC = "periodic"

    @classmethod
    def parse(cls, value: BoundaryCondition | str) -> BoundaryCondition:
        """Converts a string or enum member to a boundary condition.

        Args:
            value: Either a member of this enum or one of the strings ``"open"`` and ``"periodic"``.

        Returns:
            BoundaryCondition: The parsed boundary condition.

        Raises:
            ConfigurationError: If the value does not name a boundary condition.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            msg = f"Boundary condition must be 'open' or 'periodic', got {value!r}."
            raise ConfigurationError(msg) from None


class TruncationParams:
    """Truncation parameters.

    Controls the bounded-rank update of the MPS after every two-site contraction.

    Attributes:
    -----------
    threshold :
        Relative discarded weight allowed in each SVD. Singular values are dropped from the tail as long as the sum of
        their squares, divided by the total weight, stays below this value.
    max_bond_dim :
        Maximum bond dimension kept after each SVD.
    """

    def __init__(self, threshold: float = 1e-10, max_bond_dim: int = 100) -> None:
        """Initializes and validates the truncation parameters.

        Args:
            threshold: Relative SVD cutoff, by default 1e-10.
            max_bond_dim: Maximum bond dimension, by default 100.

        Raises:
            ConfigurationError: If the threshold is negative or the maximum bond dimension is smaller than one.
        """
        if threshold < 0:
            msg = f"Truncation threshold must be non-negative, got {threshold}."
            raise ConfigurationError(msg)
        if max_bond_dim < 1:
            msg = f"Maximum bond dimension must be at least 1, got {max_bond_dim}."
            raise ConfigurationError(msg)
        self.threshold = float(threshold)
        self.max_bond_dim = int(max_bond_dim)

    def __repr__(self) -> str:
        """Returns a short representation of the parameters."""
        return f"TruncationParams(threshold={self.threshold}, max_bond_dim={self.max_bond_dim})"
