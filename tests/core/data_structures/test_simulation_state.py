# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the simulation state and its initial states."""

from __future__ import annotations

from fractions import Fraction

import numpy as np
import pytest

from mqt.qcmps.core.data_structures.rng_registry import RNGRegistry
from mqt.qcmps.core.data_structures.simulation_state import BasisState, ProductState, RandomMPS, SimulationState
from mqt.qcmps.core.libraries.observables_library import MaxBondDim
from mqt.qcmps.errors import ConfigurationError, ValidationError


def basis_vector(index: int, dim: int) -> np.ndarray:
    """Dense computational basis vector."""
    vec = np.zeros(dim, dtype=complex)
    vec[index] = 1
    return vec


def test_default_state() -> None:
    """Tests that a new state is |0...0⟩ with the truncation defaults."""
    state = SimulationState(3)
    assert np.allclose(state.to_vec(), basis_vector(0, 8))
    assert state.threshold == 1e-10
    assert state.max_bond_dim == 100
    assert not state.has_rng


def test_invalid_configuration() -> None:
    """Tests that invalid chain layouts are rejected on construction."""
    with pytest.raises(ConfigurationError):
        SimulationState(5, "periodic")
    with pytest.raises(ConfigurationError):
        SimulationState(4, local_dim=1)
    with pytest.raises(ConfigurationError):
        SimulationState(4, max_bond_dim=0)


def test_product_state_last_site() -> None:
    """Tests that x0 = 1/2**L flips the last physical site."""
    state = SimulationState(4).initialize(ProductState(Fraction(1, 16)))
    assert ProductState(Fraction(1, 16)).physical_bits(4) == [0, 0, 0, 1]
    assert np.allclose(state.to_vec(), basis_vector(1, 16))


def test_product_state_string() -> None:
    """Tests that fractions can be given as strings."""
    assert ProductState("3/8").physical_bits(3) == [0, 1, 1]
    with pytest.raises(ConfigurationError):
        ProductState(1)


def test_product_state_requires_qubits() -> None:
    """Tests that product fractions only describe qubit chains."""
    state = SimulationState(2, local_dim=3)
    with pytest.raises(ConfigurationError):
        state.initialize(ProductState(Fraction(1, 2)))


def test_periodic_state_vector_in_physical_order() -> None:
    """Tests that the dense vector of a folded chain is reported in physical order."""
    state = SimulationState(4, "periodic").initialize(ProductState(Fraction(1, 4)))
    assert state.storage_index(2) == 2
    assert np.allclose(state.to_vec(), basis_vector(0b0100, 16))

    state.initialize(BasisState("0001"))
    assert state.storage_index(4) == 1
    assert np.allclose(state.to_vec(), basis_vector(0b0001, 16))


def test_basis_state_qutrits() -> None:
    """Tests basis states of qutrit chains."""
    state = SimulationState(2, local_dim=3).initialize(BasisState([1, 2]))
    assert np.allclose(state.to_vec(), basis_vector(5, 9))
    with pytest.raises(ConfigurationError):
        state.initialize(BasisState([1, 2, 0]))


def test_random_mps() -> None:
    """Tests that random initial states are normalized, bounded and drawn from the state_init stream."""
    rng = RNGRegistry(control=1, projection=2, unitary=3, measurement=4, state_init=5)
    state = SimulationState(4, rng=rng).initialize(RandomMPS(bond_dim=2))
    assert np.isclose(state.mps.norm(), 1)
    assert state.mps.get_max_bond() <= 2
    assert rng.draw_counts["state_init"] == 8
    assert rng.draw_counts["control"] == 0

    other = SimulationState(4, rng=RNGRegistry(control=1, projection=2, unitary=3, measurement=4, state_init=5))
    other.initialize(RandomMPS(bond_dim=2))
    assert np.allclose(state.to_vec(), other.to_vec())


def test_missing_rng() -> None:
    """Tests that drawing without a registry raises."""
    state = SimulationState(2)
    with pytest.raises(ConfigurationError):
        _ = state.rng
    with pytest.raises(ConfigurationError):
        state.initialize(RandomMPS())
    state.rng = RNGRegistry.from_seed(0)
    assert state.has_rng


def test_storage_index_range() -> None:
    """Tests the bounds of physical site indices."""
    state = SimulationState(4, "periodic")
    assert state.storage_indices([1, 2, 3, 4]) == [0, 2, 3, 1]
    with pytest.raises(ValidationError):
        state.storage_index(0)
    with pytest.raises(ValidationError):
        state.storage_index(5)


def test_track_and_record() -> None:
    """Tests the observable recorder."""
    state = SimulationState(3)
    state.track("bond", MaxBondDim())
    state.track("norm", lambda s: s.mps.norm())
    assert state.list_tracked() == ["bond", "norm"]

    state.record()
    state.record(i1=1)
    assert state.observables["bond"] == [1, 1]
    assert np.allclose(state.observables["norm"], [1, 1])


def test_track_errors() -> None:
    """Tests that duplicate names and non-callables are rejected."""
    state = SimulationState(3)
    state.track("bond", MaxBondDim())
    with pytest.raises(ValidationError):
        state.track("bond", MaxBondDim())
    with pytest.raises(ValidationError):
        state.track("value", 3)
