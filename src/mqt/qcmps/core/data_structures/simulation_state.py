# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Simulation state.

The SimulationState couples the MPS chain with everything needed to act on it in physical coordinates: the
boundary permutation between physical sites and storage positions, the truncation parameters of two-site updates,
the local dimension, the RNG registry consumed by randomized gates, and the observable recorder.

Initial states are described by small value objects (ProductState, BasisState, RandomMPS) that build the MPS when
handed to :meth:`SimulationState.initialize`.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import TYPE_CHECKING, Any

import numpy as np

from ...errors import ConfigurationError, ValidationError
from ..libraries.observables_library import BaseObservable
from .boundary import compute_permutation
from .networks import MPS
from .simulation_parameters import BoundaryCondition, TruncationParams

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from numpy.typing import NDArray

    from .rng_registry import RNGRegistry

logger = logging.getLogger(__name__)


class ProductState:
    """Computational basis product state encoded by a binary fraction.

    The binary expansion of ``x0`` in [0, 1) with L digits gives the level of every site, with physical site 1 as
    the most significant digit. For example ``x0 = 1/2`` sets site 1 to |1⟩ and ``x0 = 1/2**L`` sets site L to |1⟩.

    Attributes:
        x0: The fraction describing the state.
    """

    def __init__(self, x0: Fraction | int | str) -> None:
        """Initializes the product state.

        Args:
            x0: Fraction in [0, 1). Integers and strings such as "3/16" are converted with ``fractions.Fraction``.

        Raises:
            ConfigurationError: If x0 is outside [0, 1).
        """
        self.x0 = Fraction(x0)
        if not 0 <= self.x0 < 1:
            msg = f"ProductState requires 0 <= x0 < 1, got {self.x0}."
            raise ConfigurationError(msg)

    def physical_bits(self, length: int) -> list[int]:
        """Levels of the physical sites 1..L."""
        value = int(self.x0 * (1 << length))
        return [int(bit) for bit in format(value, f"0{length}b")]

    def build(self, state: SimulationState) -> MPS:
        """Builds the MPS of this product state in the storage order of ``state``."""
        if state.local_dim != 2:
            msg = f"ProductState encodes qubit levels; the state has local dimension {state.local_dim}."
            raise ConfigurationError(msg)
        return BasisState(self.physical_bits(state.length)).build(state)

    def __repr__(self) -> str:
        """Returns the fraction."""
        return f"ProductState({self.x0})"


class BasisState:
    """Computational basis product state given by one level per physical site.

    Attributes:
        levels: Level of every physical site, site 1 first.
    """

    def __init__(self, levels: Sequence[int] | str) -> None:
        """Initializes the basis state.

        Args:
            levels: Sequence of integer levels or a string of digits such as "0110".
        """
        self.levels = [int(level) for level in levels]

    def build(self, state: SimulationState) -> MPS:
        """Builds the MPS of this basis state in the storage order of ``state``."""
        if len(self.levels) != state.length:
            msg = f"BasisState has {len(self.levels)} levels, but the chain has {state.length} sites."
            raise ConfigurationError(msg)
        basis_string = "".join(str(self.levels[phys]) for phys in state.storage_to_phys)
        return MPS(state.length, physical_dimensions=state.local_dim, state="basis", basis_string=basis_string)

    def __repr__(self) -> str:
        """Returns the levels."""
        return f"BasisState({self.levels})"


class RandomMPS:
    """Random MPS of bounded bond dimension drawn from the ``state_init`` stream.

    Every tensor has complex Gaussian entries. Bond dimensions are capped by ``bond_dim`` and by the dimension of
    the smaller side of the cut. The result is brought into canonical form and normalized.

    Attributes:
        bond_dim: Maximum bond dimension of the random MPS.
    """

    def __init__(self, bond_dim: int = 1) -> None:
        """Initializes the random state description.

        Args:
            bond_dim: Maximum bond dimension, at least 1.
        """
        if bond_dim < 1:
            msg = f"RandomMPS bond dimension must be at least 1, got {bond_dim}."
            raise ConfigurationError(msg)
        self.bond_dim = bond_dim

    def build(self, state: SimulationState) -> MPS:
        """Draws the tensors of the random MPS."""
        length, d = state.length, state.local_dim
        bonds = [1]
        for cut in range(1, length):
            bonds.append(min(self.bond_dim, d ** min(cut, length - cut)))
        bonds.append(1)

        tensors = []
        for site in range(length):
            shape = (d, bonds[site], bonds[site + 1])
            real = state.rng.draw_normal("state_init", shape)
            imag = state.rng.draw_normal("state_init", shape)
            tensors.append(real + 1j * imag)
        mps = MPS(length, tensors=tensors, physical_dimensions=d)
        mps.set_canonical_form(0)
        mps.normalize()
        return mps

    def __repr__(self) -> str:
        """Returns the bond dimension."""
        return f"RandomMPS(bond_dim={self.bond_dim})"


class SimulationState:
    """Factored state of a chain of qudits.

    Attributes:
        length: Number of sites.
        boundary_condition: Open or periodic.
        local_dim: Local Hilbert space dimension.
        truncation: Truncation parameters of two-site updates.
        phys_to_storage: 0-based storage position of every physical site.
        storage_to_phys: 0-based physical site of every storage position.
        mps: The MPS chain in storage order. Starts in |0...0⟩.
        observables: Recorded values, one list per tracked observable name.
    """

    def __init__(
        self,
        length: int,
        boundary_condition: BoundaryCondition | str = "open",
        rng: RNGRegistry | None = None,
        local_dim: int = 2,
        threshold: float = 1e-10,
        max_bond_dim: int = 100,
    ) -> None:
        """Creates a state in |0...0⟩.

        Args:
            length: Number of sites.
            boundary_condition: "open" or "periodic". Periodic chains must have even length.
            rng: Registry of RNG streams consumed by randomized gates and random initial states.
            local_dim: Local Hilbert space dimension, by default 2.
            threshold: Relative SVD cutoff of two-site updates.
            max_bond_dim: Maximum bond dimension of two-site updates.

        Raises:
            ConfigurationError: For an invalid length, boundary condition, local dimension or truncation.
        """
        self.boundary_condition = BoundaryCondition.parse(boundary_condition)
        self.phys_to_storage, self.storage_to_phys = compute_permutation(length, self.boundary_condition)
        if local_dim < 2:
            msg = f"Local dimension must be at least 2, got {local_dim}."
            raise ConfigurationError(msg)
        self.length = length
        self.local_dim = local_dim
        self.truncation = TruncationParams(threshold=threshold, max_bond_dim=max_bond_dim)
        self._rng = rng
        self.mps = MPS(length, physical_dimensions=local_dim, state="zeros")
        self.observables: dict[str, list[Any]] = {}
        self._observable_specs: dict[str, Callable[..., Any]] = {}

    @property
    def rng(self) -> RNGRegistry:
        """The attached RNG registry.

        Raises:
            ConfigurationError: If no registry is attached.
        """
        if self._rng is None:
            msg = "This operation draws random numbers, but no RNGRegistry is attached to the state."
            raise ConfigurationError(msg)
        return self._rng

    @property
    def has_rng(self) -> bool:
        """Whether an RNG registry is attached."""
        return self._rng is not None

    @rng.setter
    def rng(self, registry: RNGRegistry) -> None:
        self._rng = registry

    @property
    def threshold(self) -> float:
        """Relative SVD cutoff."""
        return self.truncation.threshold

    @property
    def max_bond_dim(self) -> int:
        """Maximum bond dimension."""
        return self.truncation.max_bond_dim

    def storage_index(self, site: int) -> int:
        """0-based storage position of a 1-based physical site.

        Raises:
            ValidationError: If the site is outside 1..L.
        """
        if not 1 <= site <= self.length:
            msg = f"Physical site {site} is outside 1..{self.length}."
            raise ValidationError(msg)
        return int(self.phys_to_storage[site - 1])

    def storage_indices(self, sites: Iterable[int]) -> list[int]:
        """Storage positions of several 1-based physical sites."""
        return [self.storage_index(site) for site in sites]

    def initialize(self, init: ProductState | BasisState | RandomMPS) -> SimulationState:
        """Replaces the MPS by the given initial state.

        Args:
            init: Description of the initial state.

        Returns:
            SimulationState: The state itself.
        """
        self.mps = init.build(self)
        logger.debug("Initialized %d-site state with %r", self.length, init)
        return self

    def to_vec(self) -> NDArray[np.complex128]:
        """Dense state vector in physical order, physical site 1 being the most significant digit."""
        tensor = self.mps.to_vec().reshape([self.local_dim] * self.length)
        return np.transpose(tensor, self.phys_to_storage).flatten()

    def track(self, name: str, observable: Callable[..., Any]) -> None:
        """Registers an observable.

        Args:
            name: Key of the recorded values in :attr:`observables`.
            observable: Callable taking the state. Library observables additionally receive the keyword arguments
                passed to :meth:`record`.

        Raises:
            ValidationError: If the name is already tracked or the observable is not callable.
        """
        if name in self._observable_specs:
            msg = f"Observable {name!r} is already tracked."
            raise ValidationError(msg)
        if not callable(observable):
            msg = f"Observable {name!r} must be callable, got {type(observable).__name__}."
            raise ValidationError(msg)
        self._observable_specs[name] = observable
        self.observables[name] = []

    def record(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Evaluates every tracked observable and appends the values.

        Args:
            **kwargs: Extra arguments forwarded to library observables, e.g. ``i1`` for DomainWall.
        """
        for name, observable in self._observable_specs.items():
            if isinstance(observable, BaseObservable):
                value = observable(self, **kwargs)
            else:
                value = observable(self)
            self.observables[name].append(value)

    def list_tracked(self) -> list[str]:
        """Names of the tracked observables in registration order."""
        return list(self._observable_specs)

    def __repr__(self) -> str:
        """Returns the chain layout and current maximum bond dimension."""
        return (
            f"SimulationState(length={self.length}, boundary_condition={self.boundary_condition.value!r}, "
            f"local_dim={self.local_dim}, max_bond={self.mps.get_max_bond()})"
        )
