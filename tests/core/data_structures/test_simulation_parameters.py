# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the configuration values."""

from __future__ import annotations

import pytest

from mqt.qcmps.core.data_structures.simulation_parameters import BoundaryCondition, TruncationParams
from mqt.qcmps.errors import ConfigurationError


def test_boundary_condition_parse() -> None:
    """Tests parsing of strings and enum members."""
    assert BoundaryCondition.parse("open") is BoundaryCondition.OPEN
    assert BoundaryCondition.parse("PERIODIC") is BoundaryCondition.PERIODIC
    assert BoundaryCondition.parse(BoundaryCondition.OPEN) is BoundaryCondition.OPEN
    with pytest.raises(ConfigurationError):
        BoundaryCondition.parse("closed")


def test_truncation_params() -> None:
    """Tests defaults and validation of the truncation parameters."""
    params = TruncationParams()
    assert params.threshold == 1e-10
    assert params.max_bond_dim == 100
    with pytest.raises(ConfigurationError):
        TruncationParams(threshold=-1.0)
    with pytest.raises(ConfigurationError):
        TruncationParams(max_bond_dim=0)
