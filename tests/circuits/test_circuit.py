# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the circuit builder."""

from __future__ import annotations

import dataclasses

import pytest

from mqt.qcmps.circuits.circuit import (
    Circuit,
    CircuitBuilder,
    DeterministicOp,
    Outcome,
    StochasticOp,
    build_circuit,
)
from mqt.qcmps.circuits.geometry import AllSites, Bricklayer, SingleSite, StaircaseLeft, StaircaseRight
from mqt.qcmps.core.data_structures.simulation_parameters import BoundaryCondition
from mqt.qcmps.core.libraries.gate_library import CNOT, HaarRandom, PauliX, Projection, Reset
from mqt.qcmps.errors import ArityError, ConfigurationError, ValidationError


def ct_model(builder: CircuitBuilder) -> None:
    """Control/Haar staircase with a projection layer."""
    builder.record_stochastic(
        "control",
        [Outcome(0.3, Reset(), StaircaseLeft(1)), Outcome(0.7, HaarRandom(), StaircaseRight(1))],
    )
    builder.record_stochastic("projection", [Outcome(0.1, Projection(0), AllSites())])


def test_build_records_in_order() -> None:
    """Tests that the circuit keeps the operations in document order."""
    circuit = build_circuit(ct_model, length=4, boundary_condition="periodic", n_steps=3)
    assert len(circuit) == 2
    assert circuit.length == 4
    assert circuit.n_steps == 3
    assert circuit.boundary_condition is BoundaryCondition.PERIODIC
    first, second = circuit.operations
    assert isinstance(first, StochasticOp)
    assert first.rng == "control"
    assert not first.compound
    assert second.compound
    assert isinstance(first.outcomes, tuple)


def test_circuit_build_alias() -> None:
    """Tests that Circuit.build matches build_circuit."""
    circuit = Circuit.build(lambda b: b.record_deterministic(PauliX(), SingleSite(1)), 2)
    assert circuit.operations == (DeterministicOp(circuit.operations[0].gate, circuit.operations[0].geometry),)
    assert circuit.boundary_condition is BoundaryCondition.OPEN
    assert circuit.n_steps == 1


def test_circuit_is_immutable() -> None:
    """Tests that a built circuit cannot be changed."""
    circuit = build_circuit(ct_model, 4)
    with pytest.raises(dataclasses.FrozenInstanceError):
        circuit.n_steps = 2  # type: ignore[misc]


def test_frozen_builder() -> None:
    """Tests that a builder rejects recordings after the circuit is built."""
    builders = []
    build_circuit(builders.append, 4)
    with pytest.raises(ValidationError):
        builders[0].record_deterministic(PauliX(), SingleSite(1))


def test_probability_sum() -> None:
    """Tests that probabilities may leave a do-nothing remainder but must not exceed one."""

    def overfull(builder: CircuitBuilder) -> None:
        builder.record_stochastic(
            "control",
            [Outcome(0.7, Reset(), StaircaseLeft(1)), Outcome(0.6, HaarRandom(), StaircaseRight(1))],
        )

    def partial(builder: CircuitBuilder) -> None:
        builder.record_stochastic(
            "control",
            [Outcome(0.5, Reset(), StaircaseLeft(1)), Outcome(0.45, HaarRandom(), StaircaseRight(1))],
        )

    with pytest.raises(ValidationError, match="exceeds 1"):
        build_circuit(overfull, 4)
    circuit = build_circuit(partial, 4)
    assert circuit.operations[0].total_probability == pytest.approx(0.95)


@pytest.mark.parametrize(
    ("rng", "outcomes"),
    [
        ("unitary", [Outcome(0.5, PauliX(), SingleSite(1))]),
        ("control", []),
        ("control", [Outcome(-0.1, PauliX(), SingleSite(1))]),
        ("control", [Outcome(1.5, PauliX(), SingleSite(1))]),
        ("control", [(0.5, PauliX(), SingleSite(1))]),
    ],
)
def test_invalid_stochastic_operations(rng: str, outcomes: list) -> None:
    """Tests that malformed stochastic operations are rejected when recorded."""
    builder = CircuitBuilder(4)
    with pytest.raises(ValidationError):
        builder.record_stochastic(rng, outcomes)


def test_arity_checked_when_recording() -> None:
    """Tests that gate support and geometry are checked before the circuit runs."""
    builder = CircuitBuilder(4)
    with pytest.raises(ArityError):
        builder.record_deterministic(CNOT(), SingleSite(1))
    with pytest.raises(ArityError):
        builder.record_stochastic("projection", [Outcome(0.5, Projection(1), Bricklayer("odd"))])
    with pytest.raises(ValidationError):
        builder.record_deterministic(PauliX(), 1)


def test_invalid_configuration() -> None:
    """Tests that invalid chains are rejected when the builder is created."""
    with pytest.raises(ConfigurationError):
        build_circuit(ct_model, 5, "periodic")
    with pytest.raises(ConfigurationError):
        build_circuit(ct_model, 4, "twisted")
    with pytest.raises(ConfigurationError):
        build_circuit(ct_model, 4, n_steps=0)
    with pytest.raises(ConfigurationError):
        build_circuit(ct_model, 0)
