# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Library of observables.

Observables are callables of a simulation state. They are registered with ``SimulationState.track`` and evaluated
by ``SimulationState.record``, which forwards its keyword arguments to every observable of this library.
All sites are 1-based physical sites; the conversion to storage positions happens here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from ...errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..data_structures.simulation_state import SimulationState


class BaseObservable:
    """Base class of library observables."""

    def __call__(self, state: SimulationState, **kwargs: Any) -> Any:  # noqa: ANN401
        """Evaluates the observable on the state.

        Args:
            state: The state to evaluate.
            **kwargs: Recording arguments. Observables ignore the ones they do not use.
        """
        raise NotImplementedError


class BornProbability(BaseObservable):
    """Probability of finding a physical site in a given computational basis level.

    Attributes:
        site: Physical site.
        outcome: Level whose probability is returned.
    """

    def __init__(self, site: int, outcome: int) -> None:
        """Initializes the observable.

        Raises:
            ValidationError: If the outcome is negative.
        """
        if outcome < 0:
            msg = f"Outcome must be a non-negative level, got {outcome}."
            raise ValidationError(msg)
        self.site = site
        self.outcome = outcome

    def __call__(self, state: SimulationState, **kwargs: Any) -> float:  # noqa: ARG002
        """Returns P(outcome) at the site."""
        probabilities = state.mps.local_probabilities(state.storage_index(self.site))
        if self.outcome >= len(probabilities):
            msg = f"Outcome {self.outcome} exceeds the local dimension {len(probabilities)}."
            raise ValidationError(msg)
        return float(probabilities[self.outcome])


class DomainWall(BaseObservable):
    """Domain wall position moment.

    Scanning the chain cyclically from the sampling site i1, the observable sums the probability that the first
    |1⟩ is found at scan position j, weighted by (L - j + 1)**order:

        DW = sum_j (L - j + 1)**order * <P0 ... P0 P1_j>

    The sampling site is taken from the ``i1`` recording argument, or from ``i1_fn()`` if it is not given.

    Attributes:
        order: Moment of the domain wall position.
        i1_fn: Optional callback returning the sampling site.
    """

    def __init__(self, order: int = 1, i1_fn: Callable[[], int] | None = None) -> None:
        """Initializes the observable.

        Raises:
            ValidationError: If the order is smaller than one.
        """
        if order < 1:
            msg = f"DomainWall order must be >= 1, got {order}."
            raise ValidationError(msg)
        self.order = order
        self.i1_fn = i1_fn

    def __call__(self, state: SimulationState, i1: int | None = None, **kwargs: Any) -> float:  # noqa: ARG002
        """Returns the domain wall moment for sampling site ``i1``.

        Raises:
            ValidationError: If neither ``i1`` nor ``i1_fn`` provides a sampling site.
        """
        if i1 is None:
            if self.i1_fn is None:
                msg = "DomainWall requires the sampling site: pass i1 to record() or give an i1_fn."
                raise ValidationError(msg)
            i1 = self.i1_fn()
        length = state.length
        zero = np.zeros(state.local_dim)
        zero[0] = 1
        one = np.zeros(state.local_dim)
        one[1] = 1

        scan = [(i1 + j - 1) % length + 1 for j in range(length)]
        value = 0.0
        for j, site in enumerate(scan, start=1):
            diagonals = {state.storage_index(before): zero for before in scan[: j - 1]}
            diagonals[state.storage_index(site)] = one
            value += float((length - j + 1) ** self.order) * state.mps.expect_diagonal(diagonals)
        return value


class EntanglementEntropy(BaseObservable):
    """Entanglement entropy across the storage bond to the right of a physical site.

    For open chains this is the bipartition {1..cut} | {cut+1..L}. For folded periodic chains the cut is taken in
    storage order.

    Attributes:
        cut: Physical site left of the cut.
        order: 1 for von Neumann, 0 for Hartley, any other value for Rényi entropy.
        threshold: Schmidt weights at or below this value are ignored.
    """

    def __init__(self, cut: int, order: float = 1, threshold: float = 1e-16) -> None:
        """Initializes the observable.

        Raises:
            ValidationError: If cut, order or threshold are out of range.
        """
        if cut < 1:
            msg = f"EntanglementEntropy cut must be >= 1, got {cut}."
            raise ValidationError(msg)
        if order < 0:
            msg = f"EntanglementEntropy order must be >= 0, got {order}."
            raise ValidationError(msg)
        if threshold <= 0:
            msg = f"EntanglementEntropy threshold must be > 0, got {threshold}."
            raise ValidationError(msg)
        self.cut = cut
        self.order = order
        self.threshold = threshold

    def __call__(self, state: SimulationState, **kwargs: Any) -> float:  # noqa: ARG002
        """Returns the entropy across the cut."""
        if not 1 <= self.cut < state.length:
            msg = f"Cut must satisfy 1 <= cut < {state.length}, got {self.cut}."
            raise ValidationError(msg)
        bond = state.storage_index(self.cut)
        if bond == state.length - 1:
            msg = f"Physical site {self.cut} is stored last; there is no bond to its right."
            raise ValidationError(msg)
        return float(state.mps.get_entropy(bond, order=self.order, threshold=self.threshold))


class MaxBondDim(BaseObservable):
    """Largest bond dimension of the MPS."""

    def __call__(self, state: SimulationState, **kwargs: Any) -> int:  # noqa: ARG002
        """Returns the maximum bond dimension."""
        return state.mps.get_max_bond()


class StringOrder(BaseObservable):
    """String order parameter of a spin-1 chain.

        O(i, j) = <Sz_i exp(i pi sum_{i<k<j} Sz_k) Sz_j>

    All factors are diagonal in the (m=+1, m=0, m=-1) basis.

    Attributes:
        i: First physical site.
        j: Second physical site, j > i.
    """

    def __init__(self, i: int, j: int) -> None:
        """Initializes the observable.

        Raises:
            ValidationError: If the sites are not positive and increasing.
        """
        if i < 1 or j <= i:
            msg = f"StringOrder requires 1 <= i < j, got i={i}, j={j}."
            raise ValidationError(msg)
        self.i = i
        self.j = j

    def __call__(self, state: SimulationState, **kwargs: Any) -> float:  # noqa: ARG002
        """Returns the string order parameter."""
        if state.local_dim != 3:
            msg = f"StringOrder is defined for spin-1 chains, got local dimension {state.local_dim}."
            raise ValidationError(msg)
        s_z = np.array([1.0, 0.0, -1.0])
        string = np.exp(1j * np.pi * s_z).real
        diagonals = {state.storage_index(site): string for site in range(self.i + 1, self.j)}
        diagonals[state.storage_index(self.i)] = s_z
        diagonals[state.storage_index(self.j)] = s_z
        return float(state.mps.expect_diagonal(diagonals))
