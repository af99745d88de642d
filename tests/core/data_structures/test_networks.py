# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the MPS class.

This module covers initialization, canonical forms and orthogonality center tracking, norms, local probabilities,
diagonal expectation values, entanglement entropies and the dense conversion.
"""

from __future__ import annotations

import numpy as np
import opt_einsum as oe
import pytest

from mqt.qcmps.core.data_structures.networks import MPS
from mqt.qcmps.core.libraries.gate_library import CNOT, Hadamard
from mqt.qcmps.core.methods.operations import apply_single_site_operator, apply_two_site_operator
from mqt.qcmps.errors import ConfigurationError, ValidationError


def random_mps(length: int, bond_dim: int, seed: int) -> MPS:
    """Random unnormalized MPS with open boundary bonds."""
    rng = np.random.default_rng(seed)
    bonds = [1] + [bond_dim] * (length - 1) + [1]
    tensors = [
        rng.standard_normal((2, bonds[i], bonds[i + 1])) + 1j * rng.standard_normal((2, bonds[i], bonds[i + 1]))
        for i in range(length)
    ]
    return MPS(length, tensors=tensors)


def bell_mps() -> MPS:
    """Two-site Bell state (|00> + |11>)/sqrt(2)."""
    mps = MPS(2, state="zeros")
    apply_single_site_operator(mps, Hadamard().matrix, 0)
    apply_two_site_operator(mps, CNOT().matrix, (0, 1), threshold=1e-12)
    return mps


@pytest.mark.parametrize(
    ("state", "expected_index"),
    [("zeros", 0b000), ("ones", 0b111), ("Neel", 0b010), ("wall", 0b011)],
)
def test_init_product_states(state: str, expected_index: int) -> None:
    """Tests that product state strings produce the expected basis vector."""
    mps = MPS(3, state=state)
    expected = np.zeros(8)
    expected[expected_index] = 1
    assert np.allclose(mps.to_vec(), expected)
    assert mps.orthogonality_center == 0
    assert mps.get_max_bond() == 1


def test_init_x_plus() -> None:
    """Tests the uniform superposition."""
    mps = MPS(2, state="x+")
    assert np.allclose(mps.to_vec(), np.full(4, 0.5))


def test_init_basis_qudit() -> None:
    """Tests a qutrit basis state."""
    mps = MPS(2, physical_dimensions=3, state="basis", basis_string="21")
    expected = np.zeros(9)
    expected[2 * 3 + 1] = 1
    assert np.allclose(mps.to_vec(), expected)


def test_init_errors() -> None:
    """Tests invalid initializations."""
    with pytest.raises(ConfigurationError):
        MPS(2, state="unknown")
    with pytest.raises(ConfigurationError):
        MPS(2, state="basis")
    with pytest.raises(ConfigurationError):
        MPS(2, state="basis", basis_string="012")
    with pytest.raises(ConfigurationError):
        MPS(2, state="basis", basis_string="02")
    with pytest.raises(ConfigurationError):
        MPS(0)
    with pytest.raises(ConfigurationError):
        MPS(2, tensors=[np.ones((2, 1, 1))])


def test_set_canonical_form() -> None:
    """Tests that the canonical form keeps the state and makes the other tensors isometries."""
    mps = random_mps(5, 3, seed=1)
    vec = mps.to_vec()
    assert mps.orthogonality_center is None

    mps.set_canonical_form(2)
    assert mps.orthogonality_center == 2
    assert np.allclose(mps.to_vec(), vec)
    for site in range(2):
        tensor = mps.tensors[site]
        mat = oe.contract("ijk, ijl->kl", np.conj(tensor), tensor)
        assert np.allclose(mat, np.eye(mat.shape[0]))
    for site in range(3, 5):
        tensor = mps.tensors[site]
        mat = oe.contract("ijk, ilk->jl", tensor, np.conj(tensor))
        assert np.allclose(mat, np.eye(mat.shape[0]))


def test_move_orthogonality_center() -> None:
    """Tests that moving the center keeps the state and tracks the position."""
    mps = random_mps(4, 2, seed=2)
    vec = mps.to_vec()
    mps.move_orthogonality_center(3)
    assert mps.orthogonality_center == 3
    mps.move_orthogonality_center(0)
    assert mps.orthogonality_center == 0
    assert np.allclose(mps.to_vec(), vec)
    with pytest.raises(ValidationError):
        mps.move_orthogonality_center(4)


def test_init_rejects_inconsistent_tensors() -> None:
    """Tests that given tensors are checked for their shapes and bond agreement."""
    with pytest.raises(ValidationError):
        MPS(2, tensors=[np.ones((2, 1, 2)), np.ones((2, 3, 1))])
    with pytest.raises(ValidationError):
        MPS(1, tensors=[np.ones((3, 1, 1))])
    with pytest.raises(ValidationError):
        MPS(1, tensors=[np.ones((2, 1))])
    with pytest.raises(ValidationError):
        MPS(2, tensors=[np.ones((2, 2, 1)), np.ones((2, 1, 1))])
    mps = MPS(1, tensors=[np.ones((3, 1, 1))], physical_dimensions=3)
    assert mps.physical_dimensions == [3]


def test_norm_and_normalize() -> None:
    """Tests the norm with known and unknown center and the normalization."""
    mps = random_mps(4, 2, seed=4)
    expected = np.linalg.norm(mps.to_vec())
    assert np.isclose(mps.norm(), expected)
    assert np.isclose(np.sqrt(mps.scalar_product(mps).real), expected)
    mps.normalize()
    assert np.isclose(mps.norm(), 1.0)
    assert np.isclose(np.linalg.norm(mps.to_vec()), 1.0)


def test_local_probabilities() -> None:
    """Tests Born probabilities of single sites."""
    mps = MPS(2, state="x+")
    assert np.allclose(mps.local_probabilities(1), [0.5, 0.5])
    mps = MPS(2, state="Neel")
    assert np.allclose(mps.local_probabilities(0), [1.0, 0.0])
    assert np.allclose(mps.local_probabilities(1), [0.0, 1.0])


def test_expect_diagonal() -> None:
    """Tests projector products on a Bell state."""
    mps = bell_mps()
    p0 = np.array([1.0, 0.0])
    p1 = np.array([0.0, 1.0])
    assert np.isclose(mps.expect_diagonal({0: p0, 1: p0}), 0.5)
    assert np.isclose(mps.expect_diagonal({0: p0, 1: p1}), 0.0)
    assert np.isclose(mps.expect_diagonal({1: p1}), 0.5)
    assert np.isclose(mps.expect_diagonal({}), 1.0)


def test_entropy_bell_state() -> None:
    """Tests that every Rényi entropy of a Bell pair equals log 2."""
    mps = bell_mps()
    for order in (0, 1, 2):
        assert np.isclose(mps.get_entropy(0, order=order), np.log(2))
    assert np.allclose(mps.get_schmidt_spectrum(0), [1 / np.sqrt(2), 1 / np.sqrt(2)])


def test_entropy_product_state() -> None:
    """Tests that product states carry no entanglement."""
    mps = MPS(3, state="x+")
    assert np.isclose(mps.get_entropy(1), 0.0)
    with pytest.raises(ValidationError):
        mps.get_entropy(2)


def test_check_if_valid_mps() -> None:
    """Tests the bond consistency check."""
    mps = random_mps(3, 2, seed=5)
    mps.check_if_valid_mps()
    mps.tensors[1] = np.ones((2, 3, 2))
    with pytest.raises(ValidationError):
        mps.check_if_valid_mps()


def test_bond_dims() -> None:
    """Tests the reported bond dimensions."""
    mps = random_mps(4, 3, seed=6)
    assert mps.get_bond_dims() == [3, 3, 3]
    assert mps.get_max_bond() == 3
