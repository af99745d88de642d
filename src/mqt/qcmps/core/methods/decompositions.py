# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Decompositions.

This module implements the left and right moving QR decompositions used to move the orthogonality center of the
MPS and the truncated two-site SVD used after every two-site update.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


def right_qr(mps_tensor: NDArray[np.complex128]) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Right QR.

    Performs the QR decomposition of an MPS tensor moving to the right.

    Args:
        mps_tensor: The tensor to be decomposed.

    Returns:
        q_tensor: The Q tensor with the left virtual leg and the physical
            leg (phys,left,new).
        r_mat: The R matrix with the right virtual leg (new,right).
    """
    old_shape = mps_tensor.shape
    qr_shape = (old_shape[0] * old_shape[1], old_shape[2])
    mps_tensor = mps_tensor.reshape(qr_shape)
    q_mat, r_mat = np.linalg.qr(mps_tensor)
    new_shape = (old_shape[0], old_shape[1], -1)
    q_tensor = q_mat.reshape(new_shape)
    return q_tensor, r_mat


def left_qr(mps_tensor: NDArray[np.complex128]) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Left QR.

    Performs the QR decomposition of an MPS tensor moving to the left.

    Args:
        mps_tensor: The tensor to be decomposed.

    Returns:
        q_tensor: The Q tensor with the physical leg and the right virtual
            leg (phys,new,right).
        r_mat: The R matrix with the left virtual leg (left,new).
    """
    old_shape = mps_tensor.shape
    mps_tensor = mps_tensor.transpose(0, 2, 1)
    qr_shape = (old_shape[0] * old_shape[2], old_shape[1])
    mps_tensor = mps_tensor.reshape(qr_shape)
    q_mat, r_mat = np.linalg.qr(mps_tensor)
    q_tensor = q_mat.reshape((old_shape[0], old_shape[2], -1))
    q_tensor = q_tensor.transpose(0, 2, 1)
    r_mat = r_mat.T
    return q_tensor, r_mat


def truncation_rank(s_vec: NDArray[np.float64], threshold: float, max_bond_dim: int | None = None) -> int:
    """Number of singular values kept by a truncation.

    Singular values are discarded from the tail as long as the discarded weight, relative to the total weight
    ``sum(s**2)``, stays at or below ``threshold``. At least one value is always kept.

    Args:
        s_vec: Singular values in descending order.
        threshold: Relative discarded weight allowed.
        max_bond_dim: Upper bound on the number of kept values.

    Returns:
        int: Number of leading singular values to keep.
    """
    keep = len(s_vec)
    total_norm = float(np.sum(s_vec**2))
    if total_norm > 0:
        discard = 0.0
        for idx, s in enumerate(reversed(s_vec)):
            discard += float(s**2)
            if discard / total_norm > threshold:
                keep = len(s_vec) - idx
                break
    else:
        keep = 1
    if max_bond_dim is not None:
        keep = min(keep, max_bond_dim)
    return max(keep, 1)


def two_site_svd(
    theta: NDArray[np.complex128],
    threshold: float,
    max_bond_dim: int | None = None,
) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Split a two-site tensor with a truncated SVD.

    The two-site tensor Θ has shape (phys_i, phys_j, L, R). It is reshaped to a matrix of shape
    (phys_i*L) × (phys_j*R), decomposed, truncated, and split into A' (phys_i, L, k), which is left-canonical, and
    B' (phys_j, k, R), which absorbs the singular values and therefore carries the orthogonality center.

    Args:
        theta: Two-site tensor (phys_i, phys_j, L, R).
        threshold: Relative discarded weight allowed.
        max_bond_dim: Maximum bond dimension kept.

    Returns:
        tuple[NDArray[np.complex128], NDArray[np.complex128]]: The tensors A' and B'.
    """
    phys_i, phys_j, left, right = theta.shape
    theta_mat = theta.transpose(0, 2, 1, 3).reshape(phys_i * left, phys_j * right)

    u_mat, s_vec, v_mat = np.linalg.svd(theta_mat, full_matrices=False)
    keep = truncation_rank(s_vec, threshold, max_bond_dim)

    a_new = u_mat[:, :keep].reshape(phys_i, left, keep)
    v_tensor = (np.diag(s_vec[:keep]) @ v_mat[:keep, :]).reshape(keep, phys_j, right)
    b_new = v_tensor.transpose(1, 0, 2)
    return a_new, b_new
