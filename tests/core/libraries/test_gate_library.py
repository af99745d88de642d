# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the gate library."""

from __future__ import annotations

import numpy as np
import pytest

from mqt.qcmps.core.data_structures.rng_registry import RNGRegistry
from mqt.qcmps.core.data_structures.simulation_state import BasisState, SimulationState
from mqt.qcmps.core.libraries.gate_library import (
    CNOT,
    CZ,
    SWAP,
    BaseGate,
    GateLibrary,
    Hadamard,
    HaarRandom,
    Measurement,
    PauliX,
    PauliY,
    PauliZ,
    Projection,
    Reset,
    SpinSectorProjection,
    haar_unitary,
    total_spin_projector,
)
from mqt.qcmps.errors import ValidationError


@pytest.mark.parametrize("gate_class", [PauliX, PauliY, PauliZ, Hadamard, CZ, CNOT, SWAP])
def test_static_gates_are_unitary(gate_class: type[BaseGate]) -> None:
    """Tests that the static gates are unitary and need no renormalization."""
    gate = gate_class()
    dim = 2**gate.support
    assert gate.matrix.shape == (dim, dim)
    assert np.allclose(gate.matrix.conj().T @ gate.matrix, np.eye(dim))
    assert not gate.is_projective


def test_cnot_control_is_first_site() -> None:
    """Tests that CNOT flips the second site when the first is |1⟩."""
    gate = CNOT()
    state = np.zeros(4)
    state[0b10] = 1
    assert np.allclose(gate.matrix @ state, np.eye(4)[0b11])
    assert gate.label == "CX"


def test_projection() -> None:
    """Tests the projector onto a basis state."""
    gate = Projection(1)
    assert gate.is_projective
    assert gate.label == "P1"
    assert np.allclose(gate.matrix, np.diag([0, 1]))
    with pytest.raises(ValidationError):
        Projection(2)


def test_wrong_matrix_shape() -> None:
    """Tests that static gates check their matrix against support and local dimension."""
    with pytest.raises(ValidationError):
        BaseGate(np.eye(4))
    with pytest.raises(ValidationError):
        BaseGate(np.ones((2, 3)))


def test_measurement_collapses_deterministic_state() -> None:
    """Tests that a measurement of |0⟩ returns P0 and takes one measurement draw."""
    rng = RNGRegistry.from_seed(3)
    state = SimulationState(2, rng=rng)
    mat = Measurement().operator(state, [1])
    assert np.allclose(mat, np.diag([1, 0]))
    assert rng.draw_counts["measurement"] == 1
    assert Measurement().is_projective
    with pytest.raises(ValidationError):
        Measurement("X")


def test_measurement_statistics() -> None:
    """Tests that sampled outcomes follow the Born rule of |+⟩."""
    rng = RNGRegistry.from_seed(11)
    state = SimulationState(1, rng=rng)
    state.mps.tensors[0] = (np.array([1, 1]) / np.sqrt(2)).reshape(2, 1, 1).astype(complex)
    outcomes = [int(np.argmax(np.diag(Measurement().operator(state, [0])).real)) for _ in range(2000)]
    assert abs(np.mean(outcomes) - 0.5) < 0.05


def test_reset_maps_to_zero() -> None:
    """Tests that resetting |1⟩ uses the operator |0⟩⟨1|."""
    rng = RNGRegistry.from_seed(0)
    state = SimulationState(2, rng=rng).initialize(BasisState("11"))
    mat = Reset().operator(state, [0])
    expected = np.zeros((2, 2))
    expected[0, 1] = 1
    assert np.allclose(mat, expected)


def test_measurement_adapts_to_qutrits() -> None:
    """Tests that measurements follow the local dimension of the state."""
    rng = RNGRegistry.from_seed(0)
    state = SimulationState(2, rng=rng, local_dim=3).initialize(BasisState("20"))
    mat = Measurement().operator(state, [0])
    assert np.allclose(mat, np.diag([0, 0, 1]))


def test_haar_random() -> None:
    """Tests that Haar gates are unitary and consume two unitary draws per sample."""
    rng = RNGRegistry(control=0, projection=0, unitary=5, measurement=0)
    state = SimulationState(2, rng=rng)
    mat = HaarRandom().operator(state, [0, 1])
    assert mat.shape == (4, 4)
    assert np.allclose(mat.conj().T @ mat, np.eye(4))
    assert rng.draw_counts["unitary"] == 2
    assert rng.draw_counts["control"] == 0

    replay = RNGRegistry(control=1, projection=1, unitary=5, measurement=1)
    assert np.allclose(haar_unitary(SimulationState(2, rng=replay), 4), mat)


def test_total_spin_projectors() -> None:
    """Tests that the total spin projectors are orthogonal projectors of sector sizes 1, 3 and 5."""
    projectors = [total_spin_projector(s) for s in (0, 1, 2)]
    for total_spin, projector in enumerate(projectors):
        assert np.isclose(np.trace(projector), 2 * total_spin + 1)
        assert np.allclose(projector @ projector, projector)
        assert np.allclose(projector, projector.T)
    assert np.allclose(sum(projectors), np.eye(9))
    assert np.allclose(projectors[0] @ projectors[2], 0)
    with pytest.raises(ValidationError):
        total_spin_projector(3)


def test_spin_sector_projection() -> None:
    """Tests the spin sector projection gate."""
    gate = SpinSectorProjection(total_spin_projector(0) + total_spin_projector(2))
    assert gate.is_projective
    assert gate.local_dim == 3
    with pytest.raises(ValidationError):
        SpinSectorProjection(np.eye(4))


def test_gate_library() -> None:
    """Tests that the library exposes the gate classes."""
    assert GateLibrary.x is PauliX
    assert GateLibrary.haar is HaarRandom
    assert isinstance(GateLibrary.projection(0), Projection)
