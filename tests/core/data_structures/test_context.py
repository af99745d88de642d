# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the implicit current state."""

from __future__ import annotations

import pytest

from mqt.qcmps.core.data_structures.context import current_state, with_state
from mqt.qcmps.core.data_structures.simulation_state import SimulationState
from mqt.qcmps.errors import ConfigurationError


def test_no_active_state() -> None:
    """Tests that the current state is unavailable outside a with block."""
    with pytest.raises(ConfigurationError):
        current_state()


def test_nesting() -> None:
    """Tests that inner blocks shadow outer ones and restore them on exit."""
    outer = SimulationState(2)
    inner = SimulationState(4)
    with with_state(outer) as active:
        assert active is outer
        with with_state(inner):
            assert current_state() is inner
        assert current_state() is outer
    with pytest.raises(ConfigurationError):
        current_state()


def test_restored_after_exception() -> None:
    """Tests that the stack unwinds when the block raises."""
    state = SimulationState(2)
    with pytest.raises(RuntimeError), with_state(state):
        raise RuntimeError
    with pytest.raises(ConfigurationError):
        current_state()
