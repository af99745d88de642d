# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Implicit current state.

``with_state`` pushes a state onto a per-thread stack for the duration of a ``with`` block. Functions of the
imperative API fall back to :func:`current_state` when no state is passed explicitly. Nested blocks shadow the
outer state and restore it on exit, also when the block raises.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from ...errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .simulation_state import SimulationState

_local = threading.local()


def _stack() -> list[SimulationState]:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


@contextmanager
def with_state(state: SimulationState) -> Iterator[SimulationState]:
    """Makes ``state`` the current state inside the ``with`` block.

    Args:
        state: The state to activate.

    Yields:
        SimulationState: The activated state.
    """
    stack = _stack()
    stack.append(state)
    try:
        yield state
    finally:
        stack.pop()


def current_state() -> SimulationState:
    """Returns the innermost active state.

    Raises:
        ConfigurationError: If no state is active.
    """
    stack = _stack()
    if not stack:
        msg = "No active simulation state; pass a state explicitly or use `with with_state(state):`."
        raise ConfigurationError(msg)
    return stack[-1]
