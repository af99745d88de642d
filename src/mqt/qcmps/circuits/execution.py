# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Circuit execution.

This module runs circuits on a :class:`~mqt.qcmps.core.data_structures.simulation_state.SimulationState`. It takes
the same random decisions as :func:`~mqt.qcmps.circuits.expansion.expand_circuit` (both use the DecisionWalk), maps
the physical sites of every selected gate to storage positions, and contracts the gate into the MPS with
truncation. Projective gates are followed by a renormalization of the state.

Besides ``simulate`` the module offers an imperative API, ``apply_gate`` and ``apply_with_prob``, acting on an
explicit state or on the one activated with ``with_state``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tqdm import tqdm

from ..core.data_structures.context import current_state
from ..core.methods.operations import apply_single_site_operator, apply_two_site_operator, renormalize
from ..errors import ArityError, ConfigurationError, ValidationError
from .circuit import Circuit, StochasticOp, validate_outcomes
from .expansion import Application, DecisionWalk
from .geometry import is_pointer, resolve
from .recording import RecordingContext, records_after_run, validate_record_when

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from ..core.data_structures.simulation_state import SimulationState
    from ..core.libraries.gate_library import BaseGate
    from .circuit import Outcome
    from .geometry import Geometry

logger = logging.getLogger(__name__)


def apply_to_sites(state: SimulationState, gate: BaseGate, sites: Sequence[int]) -> None:
    """Applies a gate to physical sites of the state.

    Args:
        state: The state to update in place.
        gate: The gate.
        sites: 1-based physical sites in the gate's site order.

    Raises:
        ConfigurationError: If the gate is defined for another local dimension or acts on more than two sites.
        ArityError: If the number of sites differs from the gate support.
    """
    if gate.local_dim is not None and gate.local_dim != state.local_dim:
        msg = f"{gate!r} is defined for local dimension {gate.local_dim}, the state has {state.local_dim}."
        raise ConfigurationError(msg)
    if gate.support not in {1, 2}:
        msg = f"{gate!r} acts on {gate.support} sites; only one- and two-site gates are supported."
        raise ConfigurationError(msg)
    if len(sites) != gate.support:
        msg = f"{gate!r} acts on {gate.support} site(s), got sites {list(sites)}."
        raise ArityError(msg)

    storage_sites = state.storage_indices(sites)
    operator = gate.operator(state, storage_sites)
    if gate.support == 1:
        apply_single_site_operator(state.mps, operator, storage_sites[0])
    else:
        apply_two_site_operator(state.mps, operator, storage_sites, state.threshold, state.max_bond_dim)
    if gate.is_projective:
        renormalize(state.mps)


def _check_compatible(circuit: Circuit, state: SimulationState) -> None:
    if circuit.length != state.length:
        msg = f"Circuit acts on {circuit.length} sites, but the state has {state.length}."
        raise ConfigurationError(msg)
    if circuit.boundary_condition is not state.boundary_condition:
        msg = (
            f"Circuit boundary condition {circuit.boundary_condition.value!r} does not match the state's "
            f"{state.boundary_condition.value!r}."
        )
        raise ConfigurationError(msg)


def simulate(
    circuit: Circuit,
    state: SimulationState,
    n_runs: int = 1,
    *,
    record_when: str | Callable[[RecordingContext], bool] = "every_run",
    record_every: int = 1,
    record_initial: bool = False,
    show_progress: bool = False,
) -> SimulationState:
    """Runs a circuit on a state.

    Every run applies all ``circuit.n_steps`` steps. Random decisions are drawn from the decision streams of the
    state's RNG registry exactly as ``expand_circuit`` draws them, so that expanding with an identically seeded
    registry shows the trajectory of the first run (not for ``RNGRegistry.shared``, where random unitaries share
    the control generator). Pointer geometries continue from run to run.

    Args:
        circuit: The circuit to run.
        state: The state to update in place. Its tracked observables are recorded following ``record_when``.
        n_runs: Number of repetitions of the circuit.
        record_when: "never", "every_run", "every_gate", "final_only" or a predicate of a RecordingContext.
        record_every: Record only every n-th run in "every_run" mode. The final run is always recorded.
        record_initial: Record once before the first run.
        show_progress: Show a tqdm progress bar over the runs.

    Returns:
        SimulationState: The updated state.

    Raises:
        ValidationError: For ``n_runs < 1`` or an invalid recording policy.
        ConfigurationError: If circuit and state disagree in length or boundary condition.
    """
    if n_runs < 1:
        msg = f"n_runs must be >= 1, got {n_runs}."
        raise ValidationError(msg)
    validate_record_when(record_when, record_every)
    _check_compatible(circuit, state)

    walk = DecisionWalk(circuit, state.rng if state.has_rng else None)
    predicate = record_when if callable(record_when) else None
    logger.debug("Simulating %d run(s) of %d step(s) on %r", n_runs, circuit.n_steps, state)

    if record_initial:
        state.record()

    gate_idx = 0
    for run_idx in tqdm(range(1, n_runs + 1), desc="Running circuit", ncols=80, disable=not show_progress):
        for step in range(1, circuit.n_steps + 1):
            for app in walk.step(step):
                apply_to_sites(state, app.gate, app.sites)
                gate_idx += 1
                if record_when == "every_gate":
                    state.record()
                elif predicate is not None:
                    ctx = RecordingContext(
                        run_idx=run_idx,
                        step=step,
                        gate_idx=gate_idx,
                        gate=app.gate,
                        sites=app.sites,
                        is_step_boundary=app.is_step_boundary,
                        is_run_boundary=app.is_step_boundary and step == circuit.n_steps,
                    )
                    if predicate(ctx):
                        state.record()
        if records_after_run(record_when, run_idx, n_runs, record_every):
            state.record()
        logger.debug(
            "Run %d/%d done, %d gate(s) so far, max bond %d", run_idx, n_runs, gate_idx, state.mps.get_max_bond()
        )
    return state


def apply_gate(gate: BaseGate, geometry: Geometry, state: SimulationState | None = None) -> list[tuple[int, ...]]:
    """Applies a gate on every site-group of a geometry.

    A pointer geometry is advanced after its gate has been applied.

    Args:
        gate: The gate.
        geometry: Where to apply it.
        state: Target state. Defaults to the state activated with ``with_state``.

    Returns:
        list[tuple[int, ...]]: The physical site-groups the gate was applied to.
    """
    state = state if state is not None else current_state()
    groups = resolve(geometry, gate.support, None, state.length, state.boundary_condition, gate)
    for sites in groups:
        apply_to_sites(state, gate, sites)
        if is_pointer(geometry):
            geometry.advance(state.length, state.boundary_condition)
    return [tuple(sites) for sites in groups]


def apply_with_prob(rng: str, outcomes: Iterable[Outcome], state: SimulationState | None = None) -> list[Application]:
    """Takes one random decision between outcomes and applies the selected gate(s).

    Draws exactly like a stochastic circuit operation: once for simple geometries, once per element for compound
    ones. Pointer geometries of the outcomes are advanced in place.

    Args:
        rng: Decision stream, "control" or "projection".
        outcomes: The branches. The remaining probability is a do-nothing branch.
        state: Target state. Defaults to the state activated with ``with_state``.

    Returns:
        list[Application]: The applied gates, empty for the do-nothing branch.
    """
    state = state if state is not None else current_state()
    spec = StochasticOp(rng, validate_outcomes(rng, outcomes))
    circuit = Circuit(state.length, state.boundary_condition, 1, (spec,))
    walk = DecisionWalk(circuit, state.rng, copy_geometries=False)
    applied = []
    for app in walk.step(1):
        apply_to_sites(state, app.gate, app.sites)
        applied.append(app)
    return applied
