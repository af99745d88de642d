# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Boundary permutations.

The MPS chain stores sites in a fixed *storage* order that may differ from the *physical* order of the sites.
For an open chain both orders coincide. For a periodic chain the sites are folded,

    storage:  1  2  3    4    5  ...
    physical: 1  L  2  L-1    3  ...

so that the wrapping bond (L, 1) becomes a bond between neighbouring storage positions and every other nearest
neighbour bond spans at most two storage positions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ...errors import ConfigurationError
from .simulation_parameters import BoundaryCondition

if TYPE_CHECKING:
    from numpy.typing import NDArray


def compute_permutation(
    length: int, boundary_condition: BoundaryCondition | str
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Compute the physical/storage permutation of a chain.

    Both returned arrays are 0-based on both sides: ``phys_to_storage[site - 1]`` is the storage position of the
    1-based physical ``site`` and ``storage_to_phys`` is its inverse.

    Args:
        length: Number of sites in the chain.
        boundary_condition: Open or periodic boundary condition.

    Returns:
        tuple[NDArray[np.int64], NDArray[np.int64]]: ``(phys_to_storage, storage_to_phys)``.

    Raises:
        ConfigurationError: If the length is not positive, or if it is odd under periodic boundary condition.
    """
    bc = BoundaryCondition.parse(boundary_condition)
    if length < 1:
        msg = f"Chain length must be positive, got {length}."
        raise ConfigurationError(msg)

    if bc is BoundaryCondition.OPEN:
        identity = np.arange(length, dtype=np.int64)
        return identity, identity.copy()

    if length % 2:
        msg = f"Periodic boundary condition requires an even length for the folded storage order, got L={length}."
        raise ConfigurationError(msg)

    storage_to_phys = np.empty(length, dtype=np.int64)
    half = length // 2
    # interleave from both ends: 0, L-1, 1, L-2, ...
    storage_to_phys[0::2] = np.arange(half)
    storage_to_phys[1::2] = np.arange(length - 1, half - 1, -1)

    phys_to_storage = np.empty(length, dtype=np.int64)
    phys_to_storage[storage_to_phys] = np.arange(length)
    return phys_to_storage, storage_to_phys
