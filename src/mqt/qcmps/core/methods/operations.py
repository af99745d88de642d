# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Operator application on the MPS chain.

This module contracts one- and two-site operators into an :class:`~mqt.qcmps.core.data_structures.networks.MPS`.
Two-site operators on neighbouring storage sites are merged, contracted and split again with a truncated SVD.
Operators on sites further apart are routed with adjacent SWAP gates, applied on the neighbouring pair, and routed
back. All functions act in storage indices.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import opt_einsum as oe

from ...errors import ValidationError
from .decompositions import two_site_svd

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from ..data_structures.networks import MPS


def swap_matrix(local_dim: int) -> NDArray[np.complex128]:
    """SWAP operator of two sites of dimension ``local_dim`` as a (d^2, d^2) matrix."""
    identity = np.eye(local_dim**2, dtype=complex).reshape(local_dim, local_dim, local_dim, local_dim)
    return identity.transpose(0, 1, 3, 2).reshape(local_dim**2, local_dim**2)


def merge_mps_tensors(a: NDArray[np.complex128], b: NDArray[np.complex128]) -> NDArray[np.complex128]:
    """Merge two neighbouring MPS tensors.

    Args:
        a: Left tensor (phys_i, left, bond).
        b: Right tensor (phys_j, bond, right).

    Returns:
        NDArray[np.complex128]: Two-site tensor (phys_i, phys_j, left, right).
    """
    return oe.contract("abc,dce->adbe", a, b)


def apply_single_site_operator(mps: MPS, operator: NDArray[np.complex128], site: int) -> None:
    """Applies a single-site operator in place.

    The orthogonality center is moved to the site first, so the canonical form survives non-unitary operators.

    Args:
        mps: The state.
        operator: Matrix of shape (d, d).
        site: Storage index.
    """
    d = mps.physical_dimensions[site]
    if operator.shape != (d, d):
        msg = f"Single-site operator of shape {operator.shape} does not match local dimension {d}."
        raise ValidationError(msg)
    mps.move_orthogonality_center(site)
    mps.tensors[site] = oe.contract("ab, bcd->acd", operator, mps.tensors[site])


def apply_adjacent_two_site_operator(
    mps: MPS,
    operator: NDArray[np.complex128],
    site: int,
    threshold: float,
    max_bond_dim: int | None = None,
) -> None:
    """Applies a two-site operator to storage sites ``site`` and ``site + 1``.

    The first tensor factor of the operator acts on ``site``. After the update the orthogonality center sits on
    ``site + 1``.

    Args:
        mps: The state.
        operator: Matrix of shape (d_i*d_j, d_i*d_j).
        site: Left storage index of the pair.
        threshold: Relative discarded weight of the truncation.
        max_bond_dim: Maximum bond dimension after the update.
    """
    d_i = mps.physical_dimensions[site]
    d_j = mps.physical_dimensions[site + 1]
    op_tensor = operator.reshape(d_i, d_j, d_i, d_j)

    mps.move_orthogonality_center(site)
    theta = merge_mps_tensors(mps.tensors[site], mps.tensors[site + 1])
    theta = oe.contract("ijkl, klmn->ijmn", op_tensor, theta)
    a_new, b_new = two_site_svd(theta, threshold, max_bond_dim)
    mps.tensors[site], mps.tensors[site + 1] = a_new, b_new
    mps.orthogonality_center = site + 1


def apply_two_site_operator(
    mps: MPS,
    operator: NDArray[np.complex128],
    sites: tuple[int, int] | list[int],
    threshold: float,
    max_bond_dim: int | None = None,
) -> None:
    """Applies a two-site operator to arbitrary storage sites.

    The first tensor factor of ``operator`` acts on ``sites[0]``, the second on ``sites[1]``. If the sites are not
    neighbours in storage order, the second site is swapped next to the first, the operator applied, and the
    swaps undone. Every swap is truncated like any other two-site update.

    Args:
        mps: The state.
        operator: Matrix of shape (d^2, d^2).
        sites: The two storage indices.
        threshold: Relative discarded weight of the truncation.
        max_bond_dim: Maximum bond dimension after each update.

    Raises:
        ValidationError: If both sites coincide or the operator shape does not match.
    """
    first, second = int(sites[0]), int(sites[1])
    if first == second:
        msg = f"A two-site operator needs two distinct sites, got {first} twice."
        raise ValidationError(msg)
    d = mps.physical_dimensions[first]
    if operator.shape != (d * d, d * d):
        msg = f"Two-site operator of shape {operator.shape} does not match local dimension {d}."
        raise ValidationError(msg)

    if first > second:
        operator = operator.reshape(d, d, d, d).transpose(1, 0, 3, 2).reshape(d * d, d * d)
        first, second = second, first

    swap = swap_matrix(d)
    # move the content of `second` down to first + 1
    for k in range(second - 1, first, -1):
        apply_adjacent_two_site_operator(mps, swap, k, threshold, max_bond_dim)
    apply_adjacent_two_site_operator(mps, operator, first, threshold, max_bond_dim)
    for k in range(first + 1, second):
        apply_adjacent_two_site_operator(mps, swap, k, threshold, max_bond_dim)


def renormalize(mps: MPS) -> None:
    """Rescales the state to unit norm after a projective update."""
    mps.normalize()
