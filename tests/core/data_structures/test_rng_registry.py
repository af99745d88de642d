# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the RNG stream registry."""

from __future__ import annotations

import numpy as np
import pytest

from mqt.qcmps.core.data_structures.rng_registry import STREAMS, RNGRegistry
from mqt.qcmps.errors import ConfigurationError, ValidationError


def make_registry() -> RNGRegistry:
    """Registry with distinct seeds."""
    return RNGRegistry(control=1, projection=2, unitary=3, measurement=4)


def test_missing_seed() -> None:
    """Tests that every physics stream needs a seed."""
    with pytest.raises(ConfigurationError, match="measurement"):
        RNGRegistry(control=1, projection=2, unitary=3)


def test_determinism() -> None:
    """Tests that equal seeds give equal sequences."""
    first = make_registry()
    second = make_registry()
    assert [first.draw("control") for _ in range(5)] == [second.draw("control") for _ in range(5)]
    assert np.array_equal(first.draw_normal("unitary", (2, 2)), second.draw_normal("unitary", (2, 2)))


def test_streams_are_independent() -> None:
    """Tests that consuming one stream does not shift another."""
    first = make_registry()
    second = make_registry()
    for _ in range(10):
        first.draw("control")
    assert first.draw("projection") == second.draw("projection")


def test_from_seed() -> None:
    """Tests that all streams share the seed but not the generator."""
    registry = RNGRegistry.from_seed(7)
    assert registry.generator("control") is not registry.generator("projection")
    assert registry.draw("control") == registry.draw("projection")


def test_shared_aliases_circuit_streams() -> None:
    """Tests that the legacy mode interleaves control, projection and unitary draws."""
    shared = RNGRegistry.shared(circuit=5, measurement=6)
    assert shared.generator("control") is shared.generator("projection")
    assert shared.generator("control") is shared.generator("unitary")
    assert shared.generator("measurement") is not shared.generator("control")

    reference = np.random.default_rng(5)
    expected = reference.random(3)
    values = [shared.draw("control"), shared.draw("projection"), shared.draw("unitary")]
    assert np.allclose(values, expected)


def test_draw_counts() -> None:
    """Tests that every draw call is counted on its stream."""
    registry = make_registry()
    registry.draw("control")
    registry.draw("control")
    registry.draw_array("projection", 3)
    registry.draw_normal("unitary", (2, 2))
    assert registry.draw_counts == {"control": 2, "projection": 1, "unitary": 1, "measurement": 0, "state_init": 0}
    assert set(registry.draw_counts) == set(STREAMS)


def test_draw_range() -> None:
    """Tests that uniform draws lie in [0, 1)."""
    registry = make_registry()
    values = registry.draw_array("measurement", 1000)
    assert values.min() >= 0
    assert values.max() < 1


def test_unknown_stream() -> None:
    """Tests that unknown streams are rejected."""
    registry = make_registry()
    with pytest.raises(ValidationError):
        registry.draw("haar")
