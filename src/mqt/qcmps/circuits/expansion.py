# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Circuit expansion.

Expansion turns a symbolic circuit into the concrete list of gate applications of every step, without touching a
state. It shares the :class:`DecisionWalk` with the execution engine, so a diagram expanded with the same RNG
streams as a simulation shows exactly the trajectory the simulation takes, as long as the decision streams are
independent generators. In the aliased mode of ``RNGRegistry.shared`` random unitaries drawn during execution also
advance the decision stream, so the two diverge.

The walk consumes decision draws as follows, per step and per operation in document order:

- deterministic operations consume nothing,
- stochastic operations whose outcomes all have simple geometries consume exactly one draw,
- stochastic operations with a compound outcome geometry consume one draw per element of that geometry.

A draw selects the first outcome whose cumulative probability is strictly greater than the draw; if there is none
the do-nothing branch is taken.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.data_structures.rng_registry import RNGRegistry
from ..errors import ConfigurationError, ValidationError
from .circuit import PROBABILITY_TOLERANCE, DeterministicOp, StochasticOp
from .geometry import is_pointer, resolve

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from ..core.libraries.gate_library import BaseGate
    from .circuit import Circuit, OperationSpec, Outcome
    from .geometry import Geometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpandedOp:
    """A concrete gate application.

    Attributes:
        step: 1-based step index.
        gate: The gate, identical to the one recorded in the circuit.
        sites: 1-based physical sites in the gate's site order.
        label: Display label of the gate.
    """

    step: int
    gate: BaseGate
    sites: tuple[int, ...]
    label: str


@dataclass(frozen=True)
class Application:
    """A gate application produced by the decision walk.

    Attributes:
        step: 1-based step index.
        op_index: Index of the operation specification within the circuit.
        gate: The gate to apply.
        sites: 1-based physical sites.
        is_step_boundary: Whether this is the last possible application of the step.
    """

    step: int
    op_index: int
    gate: BaseGate
    sites: tuple[int, ...]
    is_step_boundary: bool


def select_outcome(outcomes: Sequence[Outcome], draw: float) -> int | None:
    """Index of the outcome selected by a draw, or None for the do-nothing branch.

    Args:
        outcomes: The branches.
        draw: Uniform value in [0, 1).

    Returns:
        int | None: Index of the first outcome with ``draw < cumulative probability``.
    """
    cumulative = 0.0
    for idx, outcome in enumerate(outcomes):
        cumulative += outcome.probability
        if draw < cumulative:
            return idx
    return None


def copy_operations(operations: tuple[OperationSpec, ...]) -> tuple[OperationSpec, ...]:
    """Copies the operations so that pointer geometries can move without touching the circuit.

    Gates are shared with the circuit. Geometries are copied in a single pass, so a geometry instance used by
    several operations stays shared among the copies.
    """
    memo: dict[int, object] = {}
    for spec in operations:
        gates = [spec.gate] if isinstance(spec, DeterministicOp) else [outcome.gate for outcome in spec.outcomes]
        for gate in gates:
            memo[id(gate)] = gate
    return copy.deepcopy(operations, memo)


class DecisionWalk:
    """Walk through the steps of a circuit, taking every random decision.

    The walk owns private copies of the pointer geometries. It yields one :class:`Application` per selected gate
    and advances the pointer of that application's geometry when the consumer asks for the next one, i.e. after
    the consumer has applied the gate. Pointers keep their position from one run to the next.

    Attributes:
        circuit: The circuit being walked.
        rng: The registry the decision draws are taken from.
        operations: Private copy of the circuit's operations.
    """

    def __init__(self, circuit: Circuit, rng: RNGRegistry | None, *, copy_geometries: bool = True) -> None:
        """Initializes the walk.

        Args:
            circuit: The circuit to walk.
            rng: Registry of the decision streams. May be None for circuits without stochastic operations.
            copy_geometries: Whether to walk private copies of the geometries. Without copies the pointers of the
                circuit's own geometries move.
        """
        self.circuit = circuit
        self.rng = rng
        self.operations = copy_operations(circuit.operations) if copy_geometries else circuit.operations

    def step(self, step: int) -> Iterator[Application]:
        """Yields the applications of one step.

        Args:
            step: 1-based step index.

        Yields:
            Application: The selected gate applications in document order.
        """
        last = len(self.operations) - 1
        for op_index, spec in enumerate(self.operations):
            boundary = op_index == last
            if isinstance(spec, DeterministicOp):
                groups = self._resolve(spec.gate, spec.geometry, step)
                for k, sites in enumerate(groups):
                    yield Application(step, op_index, spec.gate, tuple(sites), boundary and k == len(groups) - 1)
                    self._advance(spec.geometry)
            elif isinstance(spec, StochasticOp):
                yield from self._stochastic(spec, op_index, step, boundary)
            else:
                msg = f"Unsupported operation specification {spec!r}."
                raise ValidationError(msg)

    def _stochastic(self, spec: StochasticOp, op_index: int, step: int, boundary: bool) -> Iterator[Application]:
        if spec.total_probability > 1 + PROBABILITY_TOLERANCE:
            msg = f"Outcome probabilities sum to {spec.total_probability}, which exceeds 1."
            raise ValidationError(msg)

        if not spec.compound:
            idx = select_outcome(spec.outcomes, self._draw(spec.rng))
            if idx is None:
                return
            outcome = spec.outcomes[idx]
            sites = self._resolve(outcome.gate, outcome.geometry, step)[0]
            yield Application(step, op_index, outcome.gate, tuple(sites), boundary)
            self._advance(outcome.geometry)
            return

        # compound outcomes are resolved once, simple ones when they are selected
        elements: dict[int, list[list[int]]] = {}
        for idx, outcome in enumerate(spec.outcomes):
            if outcome.geometry.compound:
                elements[idx] = self._resolve(outcome.gate, outcome.geometry, step)
        counts = {len(groups) for groups in elements.values()}
        if len(counts) != 1:
            msg = f"Compound outcome geometries of one stochastic operation disagree in element count: {counts}."
            raise ValidationError(msg)
        count = counts.pop()

        for k in range(count):
            idx = select_outcome(spec.outcomes, self._draw(spec.rng))
            if idx is None:
                continue
            outcome = spec.outcomes[idx]
            if idx in elements:
                sites = elements[idx][k]
            else:
                sites = self._resolve(outcome.gate, outcome.geometry, step)[0]
            yield Application(step, op_index, outcome.gate, tuple(sites), boundary and k == count - 1)
            self._advance(outcome.geometry)

    def _draw(self, stream: str) -> float:
        if self.rng is None:
            msg = "The circuit takes random decisions, but no RNGRegistry is available."
            raise ConfigurationError(msg)
        return self.rng.draw(stream)

    def _resolve(self, gate: BaseGate, geometry: Geometry, step: int) -> list[list[int]]:
        return resolve(geometry, gate.support, step, self.circuit.length, self.circuit.boundary_condition, gate)

    def _advance(self, geometry: Geometry) -> None:
        if is_pointer(geometry):
            geometry.advance(self.circuit.length, self.circuit.boundary_condition)


def expand_circuit(circuit: Circuit, seed: int = 0, *, rng: RNGRegistry | None = None) -> list[list[ExpandedOp]]:
    """Expands a circuit into the concrete gate applications of every step.

    Args:
        circuit: The circuit to expand.
        seed: Seed of every stream when no registry is given.
        rng: Registry providing the decision draws. Pass a registry seeded like the one of a simulation to obtain
            the trajectory that simulation takes. This does not hold for registries built with
            ``RNGRegistry.shared``, whose unitary draws during execution shift the control stream.

    Returns:
        list[list[ExpandedOp]]: One list per step, possibly empty.
    """
    registry = rng if rng is not None else RNGRegistry.from_seed(seed)
    walk = DecisionWalk(circuit, registry)
    expanded = [
        [ExpandedOp(app.step, app.gate, app.sites, app.gate.label) for app in walk.step(step)]
        for step in range(1, circuit.n_steps + 1)
    ]
    logger.debug("Expanded circuit into %d step(s), %d op(s)", len(expanded), sum(len(ops) for ops in expanded))
    return expanded
