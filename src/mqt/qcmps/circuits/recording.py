# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Recording policies.

``simulate`` records the tracked observables according to ``record_when``:

- ``"never"``: never (apart from ``record_initial``),
- ``"every_run"``: after run r when ``(r - 1) % record_every == 0``, and always after the final run,
- ``"every_gate"``: after every applied gate,
- ``"final_only"``: once, after the final run,
- a callable: evaluated with a :class:`RecordingContext` after every applied gate; records when it returns True.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..core.libraries.gate_library import BaseGate

RECORD_MODES = ("never", "every_run", "every_gate", "final_only")


@dataclass(frozen=True)
class RecordingContext:
    """Information handed to custom recording predicates after every applied gate.

    Attributes:
        run_idx: 1-based index of the current run.
        step: 1-based step within the run.
        gate_idx: Number of gates applied so far in this simulation, counting this one.
        gate: The gate just applied.
        sites: Physical sites it acted on.
        is_step_boundary: Whether the gate came from the last operation (and last element) of the step.
        is_run_boundary: Whether additionally the step is the last one of the run.
    """

    run_idx: int
    step: int
    gate_idx: int
    gate: BaseGate
    sites: tuple[int, ...]
    is_step_boundary: bool
    is_run_boundary: bool


def validate_record_when(record_when: object, record_every: int) -> None:
    """Validates a recording policy.

    Raises:
        ValidationError: For an unknown mode or a non-positive ``record_every``.
    """
    if not callable(record_when) and record_when not in RECORD_MODES:
        msg = f"record_when must be one of {list(RECORD_MODES)} or a callable, got {record_when!r}."
        raise ValidationError(msg)
    if record_every < 1:
        msg = f"record_every must be >= 1, got {record_every}."
        raise ValidationError(msg)


def records_after_run(record_when: object, run_idx: int, n_runs: int, record_every: int) -> bool:
    """Whether a run-level policy records after run ``run_idx``."""
    if record_when == "every_run":
        return (run_idx - 1) % record_every == 0 or run_idx == n_runs
    if record_when == "final_only":
        return run_idx == n_runs
    return False


def every_n_gates(n: int) -> Callable[[RecordingContext], bool]:
    """Predicate recording after every n-th applied gate."""
    if n < 1:
        msg = f"n must be >= 1, got {n}."
        raise ValidationError(msg)
    return lambda ctx: ctx.gate_idx % n == 0


def every_n_runs(n: int) -> Callable[[RecordingContext], bool]:
    """Predicate recording at the end of every n-th run.

    It fires on the last gate of the run, so a run ending in a do-nothing branch is not recorded.
    """
    if n < 1:
        msg = f"n must be >= 1, got {n}."
        raise ValidationError(msg)
    return lambda ctx: ctx.run_idx % n == 0 and ctx.is_run_boundary
