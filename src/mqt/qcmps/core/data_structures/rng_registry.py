# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Named random number streams.

Every physical source of randomness in a simulation draws from its own, independently seeded stream:

- ``control``: decisions whether a control branch is taken,
- ``projection``: decisions whether a projection branch is taken,
- ``unitary``: sampling of random (Haar) unitaries,
- ``measurement``: Born-rule measurement outcomes,
- ``state_init``: random initial states.

A stream's sequence depends only on its seed and on the number of draws taken from it, never on the consumption of
any other stream. Streams are fixed when the registry is built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ...errors import ConfigurationError, ValidationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

PHYSICS_STREAMS = ("control", "projection", "unitary", "measurement")
STREAMS = (*PHYSICS_STREAMS, "state_init")

# Streams a circuit may name in a stochastic operation.
DECISION_STREAMS = ("control", "projection")


class RNGRegistry:
    """Registry of named random number generators.

    Attributes:
        streams: Mapping from stream name to ``numpy.random.Generator``.
        draw_counts: Number of draw calls served by each stream name.
    """

    def __init__(
        self,
        *,
        control: int | None = None,
        projection: int | None = None,
        unitary: int | None = None,
        measurement: int | None = None,
        state_init: int = 0,
    ) -> None:
        """Creates one independently seeded generator per stream.

        The four physics streams have no default seed and must be given explicitly. ``state_init`` is only consumed
        by random initial states and defaults to 0.

        Args:
            control: Seed of the control-decision stream.
            projection: Seed of the projection-decision stream.
            unitary: Seed of the random-unitary stream.
            measurement: Seed of the measurement-outcome stream.
            state_init: Seed of the initial-state stream.

        Raises:
            ConfigurationError: If a physics stream has no seed.
        """
        seeds = {"control": control, "projection": projection, "unitary": unitary, "measurement": measurement}
        missing = [name for name, seed in seeds.items() if seed is None]
        if missing:
            msg = f"Missing seed for RNG stream(s) {missing}; all of {list(PHYSICS_STREAMS)} are required."
            raise ConfigurationError(msg)
        seeds["state_init"] = state_init
        self.streams: dict[str, np.random.Generator] = {
            name: np.random.default_rng(seed) for name, seed in seeds.items()
        }
        self.draw_counts: dict[str, int] = dict.fromkeys(STREAMS, 0)

    @classmethod
    def from_seed(cls, seed: int) -> RNGRegistry:
        """Registry whose streams are all seeded with the same integer.

        The streams remain independent generator instances, so consuming one never advances another.

        Args:
            seed: Seed used for every stream.

        Returns:
            RNGRegistry: The new registry.
        """
        return cls(control=seed, projection=seed, unitary=seed, measurement=seed, state_init=seed)

    @classmethod
    def shared(cls, *, circuit: int, measurement: int, state_init: int = 0) -> RNGRegistry:
        """Registry reproducing a legacy single-stream reference implementation.

        ``control``, ``projection`` and ``unitary`` are aliases of one generator seeded with ``circuit``, so their
        draws interleave exactly as in a simulation that used a single circuit RNG. Only meant for verification
        against such reference data.

        Args:
            circuit: Seed of the shared circuit generator.
            measurement: Seed of the measurement stream.
            state_init: Seed of the initial-state stream.

        Returns:
            RNGRegistry: The aliased registry.
        """
        registry = cls(
            control=circuit, projection=circuit, unitary=circuit, measurement=measurement, state_init=state_init
        )
        shared_generator = registry.streams["control"]
        registry.streams["projection"] = shared_generator
        registry.streams["unitary"] = shared_generator
        return registry

    def generator(self, stream: str) -> np.random.Generator:
        """Returns the raw generator of a stream.

        Args:
            stream: Name of the stream.

        Returns:
            np.random.Generator: The generator backing the stream.

        Raises:
            ValidationError: If the stream does not exist.
        """
        try:
            return self.streams[stream]
        except KeyError:
            msg = f"Unknown RNG stream {stream!r}; available streams are {list(STREAMS)}."
            raise ValidationError(msg) from None

    def draw(self, stream: str) -> float:
        """Draws one uniform float in [0, 1) from a stream."""
        value = float(self.generator(stream).random())
        self.draw_counts[stream] += 1
        return value

    def draw_array(self, stream: str, shape: int | tuple[int, ...]) -> NDArray[np.float64]:
        """Draws an array of uniform floats in [0, 1) from a stream.

        Args:
            stream: Name of the stream.
            shape: Shape of the returned array.

        Returns:
            NDArray[np.float64]: The drawn values.
        """
        values = self.generator(stream).random(shape)
        self.draw_counts[stream] += 1
        return values

    def draw_normal(self, stream: str, shape: int | tuple[int, ...]) -> NDArray[np.float64]:
        """Draws an array of standard normal floats from a stream.

        Args:
            stream: Name of the stream.
            shape: Shape of the returned array.

        Returns:
            NDArray[np.float64]: The drawn values.
        """
        values = self.generator(stream).standard_normal(shape)
        self.draw_counts[stream] += 1
        return values

    def __repr__(self) -> str:
        """Returns the stream names and their draw counts."""
        return f"RNGRegistry(draw_counts={self.draw_counts})"
