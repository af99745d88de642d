# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Geometries.

A geometry describes *where* a gate acts, independently of the chain it is eventually applied to. Resolving a
geometry against a chain length and boundary condition yields a list of site-groups (1-based physical sites), one
group per gate application.

Static geometries (SingleSite, AdjacentPair) always yield one group. Compound geometries (Bricklayer, AllSites)
yield several groups that are applied one after the other. Pointer geometries (StaircaseLeft, StaircaseRight) own
a position that moves by one site every time their gate has been applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.data_structures.simulation_parameters import BoundaryCondition
from ..errors import ArityError, ResolutionError, ValidationError

if TYPE_CHECKING:
    from ..core.libraries.gate_library import BaseGate

BRICKLAYER_PARITIES = ("odd", "even", "nnn_odd_1", "nnn_odd_2", "nnn_even_1", "nnn_even_2")


class Geometry:
    """Base class of all geometries.

    Attributes:
        compound: Whether the geometry resolves to several independent elements.
        supports: Gate supports the geometry can carry.
    """

    compound = False
    supports: tuple[int, ...] = (1, 2)

    def site_groups(
        self, support: int, length: int, bc: BoundaryCondition, step: int | None = None
    ) -> list[list[int]]:
        """Site-groups of the geometry on a chain.

        Args:
            support: Number of sites of the gate placed on the geometry.
            length: Number of sites of the chain.
            bc: Boundary condition of the chain.
            step: Circuit step, only used in error messages.

        Returns:
            list[list[int]]: 1-based physical site-groups.
        """
        raise NotImplementedError


class SingleSite(Geometry):
    """A single physical site."""

    supports = (1,)

    def __init__(self, site: int) -> None:
        """Initializes the geometry with a 1-based site."""
        self.site = site

    def site_groups(
        self, support: int, length: int, bc: BoundaryCondition, step: int | None = None  # noqa: ARG002
    ) -> list[list[int]]:
        """Returns ``[[site]]``."""
        _check_site(self.site, length, self, step)
        return [[self.site]]

    def __repr__(self) -> str:
        """Returns the site."""
        return f"SingleSite({self.site})"


class AdjacentPair(Geometry):
    """The pair (first, first + 1). Under periodic boundary condition (L, 1) is a valid pair."""

    supports = (2,)

    def __init__(self, first: int) -> None:
        """Initializes the geometry with the 1-based first site."""
        self.first = first

    def site_groups(
        self, support: int, length: int, bc: BoundaryCondition, step: int | None = None  # noqa: ARG002
    ) -> list[list[int]]:
        """Returns ``[[first, first + 1]]``."""
        _check_site(self.first, length, self, step)
        if self.first == length:
            if bc is BoundaryCondition.OPEN:
                msg = f"Site {length} has no right neighbour on an open chain"
                raise ResolutionError(msg, self, step)
            return [[length, 1]]
        return [[self.first, self.first + 1]]

    def __repr__(self) -> str:
        """Returns the first site."""
        return f"AdjacentPair({self.first})"


class Bricklayer(Geometry):
    """One layer of a brickwork circuit.

    Parities:
        - "odd": (1,2), (3,4), ...
        - "even": (2,3), (4,5), ... plus (L,1) under periodic boundary condition
        - "nnn_odd_1": (1,3), (5,7), ...
        - "nnn_odd_2": (3,5), (7,9), ... plus (L-1,1) under periodic boundary condition
        - "nnn_even_1": (2,4), (6,8), ...
        - "nnn_even_2": (4,6), (8,10), ... plus (L,2) under periodic boundary condition

    The four next-nearest-neighbour layers together cover every pair at distance two.
    """

    compound = True
    supports = (2,)

    def __init__(self, parity: str) -> None:
        """Initializes the layer.

        Raises:
            ValidationError: If the parity is unknown.
        """
        if parity not in BRICKLAYER_PARITIES:
            msg = f"Bricklayer parity must be one of {list(BRICKLAYER_PARITIES)}, got {parity!r}."
            raise ValidationError(msg)
        self.parity = parity

    def site_groups(
        self, support: int, length: int, bc: BoundaryCondition, step: int | None = None  # noqa: ARG002
    ) -> list[list[int]]:
        """Returns the pairs of the layer."""
        periodic = bc is BoundaryCondition.PERIODIC
        if self.parity == "odd":
            pairs = [[i, i + 1] for i in range(1, length, 2)]
        elif self.parity == "even":
            pairs = [[i, i + 1] for i in range(2, length, 2)]
            if periodic:
                pairs.append([length, 1])
        else:
            offset = {"nnn_odd_1": 1, "nnn_odd_2": 3, "nnn_even_1": 2, "nnn_even_2": 4}[self.parity]
            pairs = [[i, i + 2] for i in range(offset, length - 1, 4)]
            if periodic and length >= 4:
                if self.parity == "nnn_odd_2":
                    pairs.append([length - 1, 1])
                elif self.parity == "nnn_even_2":
                    pairs.append([length, 2])
        return pairs

    def __repr__(self) -> str:
        """Returns the parity."""
        return f"Bricklayer({self.parity!r})"


class AllSites(Geometry):
    """Every site of the chain, one group per site."""

    compound = True
    supports = (1,)

    def site_groups(
        self, support: int, length: int, bc: BoundaryCondition, step: int | None = None  # noqa: ARG002
    ) -> list[list[int]]:
        """Returns ``[[1], [2], ..., [L]]``."""
        return [[site] for site in range(1, length + 1)]

    def __repr__(self) -> str:
        """Returns the class name."""
        return "AllSites()"


class _Staircase(Geometry):
    """Pointer geometry moving by one site per application."""

    direction = 1

    def __init__(self, start: int) -> None:
        """Initializes the pointer.

        Raises:
            ValidationError: If the start is not a positive site.
        """
        if start < 1:
            msg = f"Pointer start must be a positive site, got {start}."
            raise ValidationError(msg)
        self._position = start

    @property
    def position(self) -> int:
        """Current 1-based position of the pointer."""
        return self._position

    def _edge(self, length: int) -> int:
        return 1 if self.direction > 0 else length

    def site_groups(
        self, support: int, length: int, bc: BoundaryCondition, step: int | None = None
    ) -> list[list[int]]:
        """Returns ``[[p]]`` for one-site gates and ``[[p, p ± 1]]`` for two-site gates.

        On an open chain a pointer whose partner would leave the chain is first reset to its starting edge.
        """
        _check_site(self._position, length, self, step)
        if support != 2:
            return [[self._position]]
        partner = self._position + self.direction
        if not 1 <= partner <= length:
            if bc is BoundaryCondition.OPEN:
                self._position = self._edge(length)
                partner = self._position + self.direction
                # a one-site open chain has no pair to reset to
                _check_site(partner, length, self, step)
            else:
                partner = (partner - 1) % length + 1
        return [[self._position, partner]]

    def advance(self, length: int, bc: BoundaryCondition) -> None:
        """Moves the pointer by one site, wrapping (periodic) or resetting to the starting edge (open)."""
        position = self._position + self.direction
        if not 1 <= position <= length:
            position = (position - 1) % length + 1 if bc is BoundaryCondition.PERIODIC else self._edge(length)
        self._position = position

    def __repr__(self) -> str:
        """Returns the current position."""
        return f"{type(self).__name__}({self._position})"


class StaircaseRight(_Staircase):
    """Pointer moving to the right: resolves to (p, p+1)."""

    direction = 1


class StaircaseLeft(_Staircase):
    """Pointer moving to the left: resolves to (p, p-1)."""

    direction = -1


AlternatingLayer = Bricklayer
MovingPointerRight = StaircaseRight
MovingPointerLeft = StaircaseLeft


def is_pointer(geometry: Geometry) -> bool:
    """Whether the geometry owns a moving pointer."""
    return isinstance(geometry, _Staircase)


def resolve(
    geometry: Geometry,
    support: int,
    step: int | None,
    length: int,
    boundary_condition: BoundaryCondition | str,
    gate: BaseGate | None = None,
) -> list[list[int]]:
    """Resolves a geometry to site-groups and checks them against the gate support.

    Resolving a pointer geometry on an open chain may reset its position to the starting edge. It never advances
    the pointer.

    Args:
        geometry: The geometry to resolve.
        support: Number of sites of the gate.
        step: Circuit step, used in error messages.
        length: Number of sites of the chain.
        boundary_condition: Boundary condition of the chain.
        gate: The gate, used in error messages.

    Returns:
        list[list[int]]: 1-based physical site-groups.

    Raises:
        ArityError: If a group size differs from the gate support.
        ResolutionError: If the geometry addresses sites outside the chain.
    """
    if not isinstance(geometry, Geometry):
        msg = f"Expected a Geometry, got {type(geometry).__name__}."
        raise ValidationError(msg)
    bc = BoundaryCondition.parse(boundary_condition)
    groups = geometry.site_groups(support, length, bc, step)
    for group in groups:
        if len(group) != support:
            name = repr(gate) if gate is not None else f"a {support}-site gate"
            msg = f"{name} acts on {support} site(s), but {geometry!r} resolves to {len(group)}-site groups."
            raise ArityError(msg)
    return groups


def _check_site(site: int, length: int, geometry: Geometry, step: int | None) -> None:
    if not 1 <= site <= length:
        msg = f"Site {site} is outside 1..{length}"
        raise ResolutionError(msg, geometry, step)


def check_arity(gate: BaseGate, geometry: Geometry) -> None:
    """Checks that a geometry can carry a gate, without resolving it.

    Raises:
        ArityError: If the gate support is not one of the supports of the geometry.
    """
    if gate.support not in geometry.supports:
        msg = (
            f"{gate!r} acts on {gate.support} site(s), but {geometry!r} only places "
            f"{' or '.join(str(s) for s in geometry.supports)}-site gates."
        )
        raise ArityError(msg)
