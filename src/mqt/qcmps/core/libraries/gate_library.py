# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Library of quantum gates.

This module defines the gates a circuit can apply. Each gate is a class derived from BaseGate and declares its
support (number of sites it acts on), its label used by the circuit renderer and its normalization class.

Unitary gates leave the norm of the state untouched. Projective gates (projections, measurements, resets and
spin-sector projections) shrink it, and the execution engine renormalizes the state after applying them.

A gate materializes its operator through ``operator(state, storage_sites)``. Static gates return a fixed matrix.
Randomized gates draw from the RNG streams attached to the state: HaarRandom from ``unitary`` and
Measurement and Reset from ``measurement``.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from ...errors import ValidationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from ..data_structures.simulation_state import SimulationState


class Normalization(Enum):
    """Normalization class of a gate."""

    UNITARY = "unitary"
    PROJECTIVE = "projective"


class BaseGate:
    """Base class representing a quantum gate.

    Attributes:
        name: The name of the gate.
        label: Short label used when rendering circuits.
        support: Number of sites the gate acts on (1 or 2).
        normalization: Whether the state must be renormalized after the gate.
        local_dim: Local dimension the gate is defined for, or None if it adapts to the state.
        matrix: The matrix representation of static gates, None for gates sampled at application time.
    """

    name: str = "gate"
    label: str = "G"
    support: int = 1
    normalization: Normalization = Normalization.UNITARY
    local_dim: int | None = 2

    def __init__(self, mat: NDArray[np.complex128] | None = None) -> None:
        """Initializes a BaseGate instance with the given matrix.

        Args:
            mat: The matrix representation of the gate, if it is static.

        Raises:
            ValidationError: If the matrix is not square or its size does not match the support.
        """
        if mat is not None:
            mat = np.asarray(mat, dtype=complex)
            if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
                msg = f"Gate matrix must be square, got shape {mat.shape}."
                raise ValidationError(msg)
            if self.local_dim is not None and mat.shape[0] != self.local_dim**self.support:
                msg = (
                    f"Gate {self.name} acts on {self.support} site(s) of dimension {self.local_dim}, "
                    f"but its matrix has shape {mat.shape}."
                )
                raise ValidationError(msg)
        self.matrix = mat

    @property
    def is_projective(self) -> bool:
        """Whether the state must be renormalized after applying the gate."""
        return self.normalization is Normalization.PROJECTIVE

    def operator(self, state: SimulationState, storage_sites: list[int]) -> NDArray[np.complex128]:  # noqa: ARG002
        """Materializes the operator acting on the given storage sites.

        Args:
            state: The state the gate is applied to.
            storage_sites: Storage indices the gate acts on, in the gate's site order.

        Returns:
            NDArray[np.complex128]: Matrix of shape (d^support, d^support).
        """
        assert self.matrix is not None
        return self.matrix

    def __repr__(self) -> str:
        """Returns the gate name."""
        return f"{type(self).__name__}()"


class PauliX(BaseGate):
    """Class representing the Pauli-X (NOT) gate."""

    name = "x"
    label = "X"

    def __init__(self) -> None:
        """Initializes the Pauli-X gate."""
        mat = np.array([[0, 1], [1, 0]])
        super().__init__(mat)


class PauliY(BaseGate):
    """Class representing the Pauli-Y gate."""

    name = "y"
    label = "Y"

    def __init__(self) -> None:
        """Initializes the Pauli-Y gate."""
        mat = np.array([[0, -1j], [1j, 0]])
        super().__init__(mat)


class PauliZ(BaseGate):
    """Class representing the Pauli-Z gate."""

    name = "z"
    label = "Z"

    def __init__(self) -> None:
        """Initializes the Pauli-Z gate."""
        mat = np.array([[1, 0], [0, -1]])
        super().__init__(mat)


class Hadamard(BaseGate):
    """Class representing the Hadamard gate."""

    name = "h"
    label = "H"

    def __init__(self) -> None:
        """Initializes the Hadamard gate."""
        mat = np.array([[1, 1], [1, -1]]) / np.sqrt(2)
        super().__init__(mat)


class Projection(BaseGate):
    """Projector |outcome⟩⟨outcome| onto a computational basis state.

    Attributes:
        outcome: The basis state projected onto (0 or 1).
    """

    name = "projection"
    normalization = Normalization.PROJECTIVE

    def __init__(self, outcome: int) -> None:
        """Initializes the projection.

        Args:
            outcome: 0 or 1.

        Raises:
            ValidationError: If the outcome is not 0 or 1.
        """
        if outcome not in {0, 1}:
            msg = f"Projection outcome must be 0 or 1, got {outcome}."
            raise ValidationError(msg)
        self.outcome = outcome
        self.label = f"P{outcome}"
        mat = np.zeros((2, 2))
        mat[outcome, outcome] = 1
        super().__init__(mat)

    def __repr__(self) -> str:
        """Returns the gate with its outcome."""
        return f"Projection({self.outcome})"


def sample_outcome(state: SimulationState, storage_site: int) -> int:
    """Samples a computational basis outcome of one site following the Born rule.

    Draws a single value from the ``measurement`` stream and returns the first level whose cumulative probability
    exceeds it.

    Args:
        state: The state to measure.
        storage_site: Storage index of the measured site.

    Returns:
        int: The sampled level.
    """
    probabilities = state.mps.local_probabilities(storage_site)
    draw = state.rng.draw("measurement")
    cumulative = np.cumsum(probabilities)
    outcome = int(np.searchsorted(cumulative, draw, side="right"))
    # guards against the cumulative sum ending slightly below one
    return min(outcome, len(probabilities) - 1)


class Measurement(BaseGate):
    """Projective measurement in the computational basis.

    The outcome is sampled from the Born probabilities of the site, and the state is collapsed onto it. Unlike
    :class:`Reset`, the site stays in the measured state.

    Attributes:
        axis: Measurement axis. Only "Z" is supported.
    """

    name = "measurement"
    label = "Mz"
    normalization = Normalization.PROJECTIVE
    local_dim = None

    def __init__(self, axis: str = "Z") -> None:
        """Initializes the measurement.

        Args:
            axis: Measurement axis.

        Raises:
            ValidationError: If the axis is not "Z".
        """
        if axis.upper() != "Z":
            msg = f"Only Z-basis measurements are supported, got axis {axis!r}."
            raise ValidationError(msg)
        self.axis = "Z"
        super().__init__()

    def operator(self, state: SimulationState, storage_sites: list[int]) -> NDArray[np.complex128]:
        """Samples an outcome and returns the projector onto it."""
        outcome = sample_outcome(state, storage_sites[0])
        mat = np.zeros((state.local_dim, state.local_dim), dtype=complex)
        mat[outcome, outcome] = 1
        return mat

    def __repr__(self) -> str:
        """Returns the gate with its axis."""
        return f"Measurement({self.axis!r})"


class Reset(BaseGate):
    """Reset of a site to |0⟩.

    The site is measured in the computational basis and the measured level is then mapped to |0⟩. The combined
    operator is |0⟩⟨k| for the sampled outcome k.
    """

    name = "reset"
    label = "Reset"
    normalization = Normalization.PROJECTIVE
    local_dim = None

    def __init__(self) -> None:
        """Initializes the reset."""
        super().__init__()

    def operator(self, state: SimulationState, storage_sites: list[int]) -> NDArray[np.complex128]:
        """Samples an outcome and returns |0⟩⟨outcome|."""
        outcome = sample_outcome(state, storage_sites[0])
        mat = np.zeros((state.local_dim, state.local_dim), dtype=complex)
        mat[0, outcome] = 1
        return mat


class CZ(BaseGate):
    """Class representing the controlled-Z (CZ) gate. Symmetric under exchange of its sites."""

    name = "cz"
    label = "CZ"
    support = 2

    def __init__(self) -> None:
        """Initializes the controlled-Z (CZ) gate."""
        mat = np.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, -1]])
        super().__init__(mat)


class CNOT(BaseGate):
    """Class representing the controlled-NOT gate. The first site is the control."""

    name = "cx"
    label = "CX"
    support = 2

    def __init__(self) -> None:
        """Initializes the controlled-NOT gate."""
        mat = np.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]])
        super().__init__(mat)


class SWAP(BaseGate):
    """Class representing the SWAP gate."""

    name = "swap"
    label = "SWAP"
    support = 2

    def __init__(self) -> None:
        """Initializes the SWAP gate."""
        mat = np.array([[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]])
        super().__init__(mat)


def haar_unitary(state: SimulationState, dim: int) -> NDArray[np.complex128]:
    """Samples a Haar random unitary from the ``unitary`` stream.

    A complex Gaussian matrix is drawn (real part first, then imaginary part) and orthonormalized with a QR
    decomposition. The phases of the diagonal of R are moved into Q so that the distribution is exactly Haar.

    Args:
        state: The state whose ``unitary`` stream is consumed.
        dim: Dimension of the unitary.

    Returns:
        NDArray[np.complex128]: A (dim, dim) unitary matrix.
    """
    real = state.rng.draw_normal("unitary", (dim, dim))
    imag = state.rng.draw_normal("unitary", (dim, dim))
    q_mat, r_mat = np.linalg.qr(real + 1j * imag)
    r_diag = np.diag(r_mat)
    return q_mat * (r_diag / np.abs(r_diag))


class HaarRandom(BaseGate):
    """Two-site Haar random unitary, freshly sampled every time it is applied."""

    name = "haar"
    label = "Haar"
    support = 2
    local_dim = None

    def __init__(self) -> None:
        """Initializes the Haar random gate."""
        super().__init__()

    def operator(self, state: SimulationState, storage_sites: list[int]) -> NDArray[np.complex128]:  # noqa: ARG002
        """Samples a fresh (d^2, d^2) unitary."""
        return haar_unitary(state, state.local_dim**2)


def spin_one_operators() -> tuple[NDArray[np.complex128], NDArray[np.complex128], NDArray[np.complex128]]:
    """Spin-1 operators Sx, Sy, Sz in the basis (m=+1, m=0, m=-1)."""
    s_plus = np.sqrt(2) * np.array([[0, 1, 0], [0, 0, 1], [0, 0, 0]], dtype=complex)
    s_minus = s_plus.conj().T
    s_x = (s_plus + s_minus) / 2
    s_y = (s_plus - s_minus) / 2j
    s_z = np.diag([1, 0, -1]).astype(complex)
    return s_x, s_y, s_z


def total_spin_projector(total_spin: int) -> NDArray[np.float64]:
    """Projector onto total spin S of two spin-1 sites.

    The 9x9 matrix is ordered with the first site as the slow index.

    Args:
        total_spin: 0, 1 or 2.

    Returns:
        NDArray[np.float64]: The projector onto the requested sector.

    Raises:
        ValidationError: If the total spin is not 0, 1 or 2.
    """
    if total_spin not in {0, 1, 2}:
        msg = f"Total spin of two spin-1 sites must be 0, 1 or 2, got {total_spin}."
        raise ValidationError(msg)
    identity = np.eye(3)
    s_squared = np.zeros((9, 9), dtype=complex)
    for s_a in spin_one_operators():
        s_total = np.kron(s_a, identity) + np.kron(identity, s_a)
        s_squared += s_total @ s_total
    projector = np.eye(9, dtype=complex)
    for other in {0, 1, 2} - {total_spin}:
        eigenvalue = other * (other + 1)
        projector = projector @ (s_squared - eigenvalue * np.eye(9)) / (total_spin * (total_spin + 1) - eigenvalue)
    return np.real(projector)


class SpinSectorProjection(BaseGate):
    """Coherent projection of two neighbouring spin-1 sites onto a set of total spin sectors.

    The state is renormalized afterwards, so repeated application does not collapse a superposition of the kept
    sectors.
    """

    name = "spin_sector_projection"
    label = "Pspin"
    support = 2
    normalization = Normalization.PROJECTIVE
    local_dim = 3

    def __init__(self, projector: NDArray[np.float64]) -> None:
        """Initializes the projection.

        Args:
            projector: 9x9 matrix acting on the two spin-1 sites.

        Raises:
            ValidationError: If the projector is not 9x9.
        """
        projector = np.asarray(projector)
        if projector.shape != (9, 9):
            msg = f"SpinSectorProjection requires a 9x9 projector for two spin-1 sites, got {projector.shape}."
            raise ValidationError(msg)
        super().__init__(projector)


class GateLibrary:
    """A collection of gate classes for use in circuits."""

    x = PauliX
    y = PauliY
    z = PauliZ
    h = Hadamard
    projection = Projection
    measurement = Measurement
    reset = Reset
    cz = CZ
    cx = CNOT
    swap = SWAP
    haar = HaarRandom
    spin_sector_projection = SpinSectorProjection
