# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Symbolic circuits.

A Circuit is an immutable, ordered list of operation specifications on a chain of fixed length and boundary
condition. It is applied ``n_steps`` times per run. Operations are either deterministic (a gate on a geometry) or
stochastic (a decision stream and a list of outcomes, each with a probability, a gate and a geometry). The
probability left over by the outcomes is an implicit do-nothing branch.

Circuits are created with :func:`build_circuit`, which hands a :class:`CircuitBuilder` to a construction function
and freezes whatever it recorded:

    def ct_model(builder):
        builder.record_stochastic(
            "control",
            [Outcome(0.3, Reset(), StaircaseLeft(1)), Outcome(0.7, HaarRandom(), StaircaseRight(1))],
        )

    circuit = build_circuit(ct_model, length=4, boundary_condition="periodic", n_steps=4)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from ..core.data_structures.boundary import compute_permutation
from ..core.data_structures.rng_registry import DECISION_STREAMS
from ..core.data_structures.simulation_parameters import BoundaryCondition
from ..core.libraries.gate_library import BaseGate
from ..errors import ConfigurationError, ValidationError
from .geometry import Geometry, check_arity

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

PROBABILITY_TOLERANCE = 1e-10


@dataclass(frozen=True)
class Outcome:
    """One branch of a stochastic operation."""

    probability: float
    gate: BaseGate
    geometry: Geometry


@dataclass(frozen=True)
class DeterministicOp:
    """A gate applied on a geometry at every step."""

    gate: BaseGate
    geometry: Geometry


@dataclass(frozen=True)
class StochasticOp:
    """A random choice between outcomes, decided by draws from a named stream.

    Attributes:
        rng: Name of the decision stream.
        outcomes: The branches, in order of the cumulative selection.
    """

    rng: str
    outcomes: tuple[Outcome, ...]

    @property
    def total_probability(self) -> float:
        """Sum of the outcome probabilities."""
        return sum(outcome.probability for outcome in self.outcomes)

    @property
    def compound(self) -> bool:
        """Whether any outcome geometry is compound, in which case one draw is taken per element."""
        return any(outcome.geometry.compound for outcome in self.outcomes)


OperationSpec = Union[DeterministicOp, StochasticOp]


def validate_outcomes(rng: str, outcomes: Iterable[Outcome]) -> tuple[Outcome, ...]:
    """Validates the arguments of a stochastic operation.

    Args:
        rng: Name of the decision stream.
        outcomes: The branches.

    Returns:
        tuple[Outcome, ...]: The outcomes as a tuple.

    Raises:
        ValidationError: For an unknown stream, an empty outcome list, a malformed outcome, a probability outside
            [0, 1], or probabilities summing to more than one.
    """
    if rng not in DECISION_STREAMS:
        msg = f"Stochastic operations must draw from one of {list(DECISION_STREAMS)}, got {rng!r}."
        raise ValidationError(msg)
    outcomes = tuple(outcomes)
    if not outcomes:
        msg = "A stochastic operation needs at least one outcome."
        raise ValidationError(msg)
    for outcome in outcomes:
        if not isinstance(outcome, Outcome):
            msg = f"Outcomes must be Outcome(probability, gate, geometry), got {outcome!r}."
            raise ValidationError(msg)
        _validate_gate_and_geometry(outcome.gate, outcome.geometry)
        if not 0 <= outcome.probability <= 1:
            msg = f"Outcome probability must lie in [0, 1], got {outcome.probability}."
            raise ValidationError(msg)
    total = sum(outcome.probability for outcome in outcomes)
    if total > 1 + PROBABILITY_TOLERANCE:
        msg = f"Outcome probabilities sum to {total}, which exceeds 1."
        raise ValidationError(msg)
    return outcomes


def _validate_gate_and_geometry(gate: BaseGate, geometry: Geometry) -> None:
    if not isinstance(gate, BaseGate):
        msg = f"Expected a gate, got {type(gate).__name__}."
        raise ValidationError(msg)
    if not isinstance(geometry, Geometry):
        msg = f"Expected a geometry, got {type(geometry).__name__}."
        raise ValidationError(msg)
    check_arity(gate, geometry)


@dataclass(frozen=True)
class Circuit:
    """Immutable symbolic circuit.

    Attributes:
        length: Number of sites.
        boundary_condition: Boundary condition of the chain.
        n_steps: Number of times the operations are applied per run.
        operations: The recorded operation specifications in document order.
    """

    length: int
    boundary_condition: BoundaryCondition
    n_steps: int
    operations: tuple[OperationSpec, ...]

    @classmethod
    def build(
        cls,
        construct: Callable[[CircuitBuilder], object],
        length: int,
        boundary_condition: BoundaryCondition | str = "open",
        n_steps: int = 1,
    ) -> Circuit:
        """Alias of :func:`build_circuit`."""
        return build_circuit(construct, length, boundary_condition, n_steps)

    def __len__(self) -> int:
        """Number of operation specifications."""
        return len(self.operations)


class CircuitBuilder:
    """Recorder handed to a circuit construction function.

    The builder is frozen when :func:`build_circuit` returns; recording on a frozen builder fails.
    """

    def __init__(self, length: int, boundary_condition: BoundaryCondition | str = "open", n_steps: int = 1) -> None:
        """Initializes an empty recorder.

        Raises:
            ConfigurationError: If the length, boundary condition or number of steps is invalid.
        """
        self.boundary_condition = BoundaryCondition.parse(boundary_condition)
        # fails for non-positive lengths and odd periodic chains
        compute_permutation(length, self.boundary_condition)
        if n_steps < 1:
            msg = f"A circuit needs at least one step, got n_steps={n_steps}."
            raise ConfigurationError(msg)
        self.length = length
        self.n_steps = n_steps
        self.operations: list[OperationSpec] = []
        self.frozen = False

    def record_deterministic(self, gate: BaseGate, geometry: Geometry) -> None:
        """Records a gate that is applied on a geometry at every step."""
        self._check_open()
        _validate_gate_and_geometry(gate, geometry)
        self.operations.append(DeterministicOp(gate, geometry))

    def record_stochastic(self, rng: str, outcomes: Iterable[Outcome]) -> None:
        """Records a stochastic choice between outcomes.

        Args:
            rng: Decision stream, "control" or "projection".
            outcomes: Branches selected by cumulative probability. The remainder is a do-nothing branch.
        """
        self._check_open()
        self.operations.append(StochasticOp(rng, validate_outcomes(rng, outcomes)))

    def freeze(self) -> Circuit:
        """Stops recording and returns the circuit."""
        self.frozen = True
        return Circuit(self.length, self.boundary_condition, self.n_steps, tuple(self.operations))

    def _check_open(self) -> None:
        if self.frozen:
            msg = "The circuit has already been built; operations can no longer be recorded."
            raise ValidationError(msg)


def build_circuit(
    construct: Callable[[CircuitBuilder], object],
    length: int,
    boundary_condition: BoundaryCondition | str = "open",
    n_steps: int = 1,
) -> Circuit:
    """Builds a circuit from a construction function.

    Args:
        construct: Function receiving a CircuitBuilder. Its return value is ignored.
        length: Number of sites.
        boundary_condition: "open" or "periodic".
        n_steps: Number of times the operations are applied per run.

    Returns:
        Circuit: The frozen circuit.
    """
    builder = CircuitBuilder(length, boundary_condition, n_steps)
    construct(builder)
    circuit = builder.freeze()
    logger.debug(
        "Built circuit with %d operation(s) on L=%d (%s), n_steps=%d",
        len(circuit.operations),
        circuit.length,
        circuit.boundary_condition.value,
        circuit.n_steps,
    )
    return circuit
