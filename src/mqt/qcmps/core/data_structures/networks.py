# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Data Structures.

This module implements the Matrix Product State (MPS) used as the factored storage of a simulation state.
Tensors are kept in *storage* order (see :mod:`mqt.qcmps.core.data_structures.boundary`) with the index order
(sigma, chi_l-1, chi_l). The MPS tracks the position of its orthogonality center so that local updates,
probabilities and Schmidt spectra can be computed without re-canonicalizing the whole chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import opt_einsum as oe

from ...errors import ConfigurationError, ValidationError
from ..methods.decompositions import left_qr, right_qr

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray


class MPS:
    """Matrix Product State (MPS) class for representing quantum states.

    The index order is (sigma, chi_l-1, chi_l).

    Attributes:
    length (int): The number of sites in the MPS.
    tensors (list[NDArray[np.complex128]]): List of rank-3 tensors representing the MPS.
    physical_dimensions (list[int]): List of physical dimensions for each site.
    orthogonality_center (int | None): Storage index of the orthogonality center, or None if the tensors are not
        known to be in mixed canonical form.

    Methods:
    get_max_bond() -> int:
        Returns the maximum bond dimension in the MPS.
    move_orthogonality_center(target: int) -> None:
        Moves the orthogonality center to a site by successive QR decompositions.
    set_canonical_form(orthogonality_center: int) -> None:
        Left and right normalizes the MPS around a selected site.
    normalize() -> None:
        Rescales the state to unit norm.
    local_probabilities(site: int) -> NDArray[np.float64]:
        Returns the Born probabilities of the basis states of one site.
    get_entropy(bond: int, order: float = 1) -> np.float64:
        Returns the (Rényi) entanglement entropy across a bond.
    to_vec() -> NDArray[np.complex128]:
        Converts the MPS to a dense state vector.
    """

    def __init__(
        self,
        length: int,
        tensors: list[NDArray[np.complex128]] | None = None,
        physical_dimensions: list[int] | int | None = None,
        state: str = "zeros",
        basis_string: str | None = None,
    ) -> None:
        """Initializes a Matrix Product State (MPS).

        Args:
            length: Number of sites in the MPS.
            tensors: Predefined tensors representing the MPS. Must match `length` if provided.
                If None, tensors are initialized according to `state`.
            physical_dimensions: Physical dimension for each site. Defaults to qubit systems (dimension 2) if None.
            state: Initial state configuration. Valid options include:
                - "zeros": Initializes all sites to |0⟩.
                - "ones": Initializes all sites to |1⟩.
                - "x+": Initializes each qubit to (|0⟩ + |1⟩)/√2.
                - "x-": Initializes each qubit to (|0⟩ - |1⟩)/√2.
                - "Neel": Alternating pattern |0101...⟩.
                - "wall": Domain wall in the middle of the chain |000111⟩.
                - "basis": Initializes the sites in the computational basis state given by `basis_string`.
                Default is "zeros".
            basis_string: String such as "0101" used by the "basis" state. Digits above 1 address qudit levels.

        Raises:
            ConfigurationError: If the tensors or dimensions do not match the length, or the state string is
                unknown.
            ValidationError: If given tensors have inconsistent shapes.
        """
        if length < 1:
            msg = f"MPS length must be positive, got {length}."
            raise ConfigurationError(msg)
        self.length = length
        if physical_dimensions is None:
            self.physical_dimensions = [2] * length
        elif isinstance(physical_dimensions, int):
            self.physical_dimensions = [physical_dimensions] * length
        else:
            self.physical_dimensions = list(physical_dimensions)
        if len(self.physical_dimensions) != length:
            msg = f"Expected {length} physical dimensions, got {len(self.physical_dimensions)}."
            raise ConfigurationError(msg)

        if tensors is not None:
            if len(tensors) != length:
                msg = f"Expected {length} tensors, got {len(tensors)}."
                raise ConfigurationError(msg)
            self.tensors = [np.asarray(tensor, dtype=complex) for tensor in tensors]
            self.orthogonality_center: int | None = None
            self.check_if_valid_mps()
            return

        self.tensors = []
        if state == "basis":
            if basis_string is None:
                msg = "basis_string must be provided for 'basis' state initialization."
                raise ConfigurationError(msg)
            self.init_mps_from_basis(basis_string, self.physical_dimensions)
        else:
            for i, d in enumerate(self.physical_dimensions):
                vector = np.zeros(d, dtype=complex)
                if state == "zeros":
                    vector[0] = 1
                elif state == "ones":
                    vector[1] = 1
                elif state == "x+":
                    vector[0] = 1 / np.sqrt(2)
                    vector[1] = 1 / np.sqrt(2)
                elif state == "x-":
                    vector[0] = 1 / np.sqrt(2)
                    vector[1] = -1 / np.sqrt(2)
                elif state == "Neel":
                    # |010101...>
                    vector[i % 2] = 1
                elif state == "wall":
                    vector[0 if i < length // 2 else 1] = 1
                else:
                    msg = f"Invalid state string {state!r}"
                    raise ConfigurationError(msg)
                self.tensors.append(vector.reshape(d, 1, 1))

        # Normalized product states are canonical around every site.
        self.orthogonality_center = 0

    def init_mps_from_basis(self, basis_string: str, physical_dimensions: list[int]) -> None:
        """Initialize a list of MPS tensors representing a product state from a basis string.

        Args:
            basis_string: A string like "0101" indicating the computational basis state.
            physical_dimensions: The physical dimension of each site (e.g. 2 for qubits, 3+ for qudits).

        Raises:
            ConfigurationError: If the string has the wrong length or a level exceeds the local dimension.
        """
        if len(basis_string) != len(physical_dimensions):
            msg = f"Basis string {basis_string!r} does not match {len(physical_dimensions)} sites."
            raise ConfigurationError(msg)
        for site, char in enumerate(basis_string):
            idx = int(char)
            if idx >= physical_dimensions[site]:
                msg = f"Level {idx} at site {site} exceeds the local dimension {physical_dimensions[site]}."
                raise ConfigurationError(msg)
            tensor = np.zeros((physical_dimensions[site], 1, 1), dtype=complex)
            tensor[idx, 0, 0] = 1.0
            self.tensors.append(tensor)

    def get_max_bond(self) -> int:
        """Write max bond dim.

        Returns:
            int: The maximum virtual bond dimension found among all tensors in the network.
        """
        global_max = 0
        for tensor in self.tensors:
            global_max = max(global_max, tensor.shape[1], tensor.shape[2])
        return global_max

    def get_bond_dims(self) -> list[int]:
        """Dimensions of the internal bonds, from left to right."""
        return [tensor.shape[2] for tensor in self.tensors[:-1]]

    def shift_orthogonality_center_right(self, current_orthogonality_center: int) -> None:
        """Shifts orthogonality center right.

        Performs a QR decomposition of the center tensor and absorbs R into the right neighbour.

        Args:
            current_orthogonality_center (int): current center
        """
        tensor = self.tensors[current_orthogonality_center]
        site_tensor, bond_tensor = right_qr(tensor)
        self.tensors[current_orthogonality_center] = site_tensor
        if current_orthogonality_center + 1 < self.length:
            self.tensors[current_orthogonality_center + 1] = oe.contract(
                "ij, ajc->aic", bond_tensor, self.tensors[current_orthogonality_center + 1]
            )
            self.orthogonality_center = current_orthogonality_center + 1
        else:
            # R is a phase times the norm; keep it so the state is untouched
            self.tensors[current_orthogonality_center] = oe.contract("aij, jk->aik", site_tensor, bond_tensor)
            self.orthogonality_center = current_orthogonality_center

    def shift_orthogonality_center_left(self, current_orthogonality_center: int) -> None:
        """Shifts orthogonality center left.

        Performs an LQ-type decomposition of the center tensor and absorbs the remainder into the left neighbour.

        Args:
            current_orthogonality_center (int): current center
        """
        tensor = self.tensors[current_orthogonality_center]
        site_tensor, bond_tensor = left_qr(tensor)
        self.tensors[current_orthogonality_center] = site_tensor
        if current_orthogonality_center > 0:
            self.tensors[current_orthogonality_center - 1] = oe.contract(
                "ajc, ci->aji", self.tensors[current_orthogonality_center - 1], bond_tensor
            )
            self.orthogonality_center = current_orthogonality_center - 1
        else:
            self.tensors[current_orthogonality_center] = oe.contract("ij, ajk->aik", bond_tensor, site_tensor)
            self.orthogonality_center = current_orthogonality_center

    def set_canonical_form(self, orthogonality_center: int) -> None:
        """Sets canonical form of MPS.

        Left and right normalizes an MPS around a selected site.
        NOTE: Slow method compared to shifting based on known form and should be avoided.

        Args:
            orthogonality_center (int): site of matrix MPS around which we normalize
        """
        self._check_site(orthogonality_center)
        for site in range(orthogonality_center):
            self.shift_orthogonality_center_right(site)
        for site in range(self.length - 1, orthogonality_center, -1):
            self.shift_orthogonality_center_left(site)
        self.orthogonality_center = orthogonality_center

    def move_orthogonality_center(self, target: int) -> None:
        """Moves the orthogonality center to a storage site.

        Uses the tracked center to shift only across the bonds in between. If the center is unknown, the full
        canonical form is set.

        Args:
            target: Storage index of the new orthogonality center.
        """
        self._check_site(target)
        if self.orthogonality_center is None:
            self.set_canonical_form(target)
            return
        while self.orthogonality_center < target:
            self.shift_orthogonality_center_right(self.orthogonality_center)
        while self.orthogonality_center > target:
            self.shift_orthogonality_center_left(self.orthogonality_center)

    def normalize(self) -> None:
        """Normalize MPS.

        Rescales the orthogonality center tensor so that the state has unit norm. If the center is unknown, the
        canonical form is set around the first site.

        Raises:
            ValidationError: If the state has zero norm.
        """
        if self.orthogonality_center is None:
            self.set_canonical_form(0)
        assert self.orthogonality_center is not None
        center = self.tensors[self.orthogonality_center]
        norm = np.linalg.norm(center)
        if norm == 0:
            msg = "Cannot normalize an MPS with zero norm."
            raise ValidationError(msg)
        self.tensors[self.orthogonality_center] = center / norm

    def scalar_product(self, other: MPS) -> np.complex128:
        """Compute the scalar (inner) product <self|other>.

        Args:
            other (MPS): The second Matrix Product State.

        Returns:
            np.complex128: The resulting scalar product.
        """
        env = np.ones((1, 1), dtype=complex)
        for bra, ket in zip(self.tensors, other.tensors):
            env = oe.contract("ab, sac, sbd->cd", env, np.conj(bra), ket)
        return np.complex128(np.squeeze(env))

    def norm(self) -> np.float64:
        """Norm calculation.

        Returns:
            np.float64: The 2-norm of the state.
        """
        if self.orthogonality_center is not None:
            return np.float64(np.linalg.norm(self.tensors[self.orthogonality_center]))
        return np.float64(np.sqrt(abs(self.scalar_product(self))))

    def local_probabilities(self, site: int) -> NDArray[np.float64]:
        """Born probabilities of the basis states of one site.

        Moves the orthogonality center to the site, after which the reduced density matrix is diagonal in the
        contracted virtual legs.

        Args:
            site: Storage index of the site.

        Returns:
            NDArray[np.float64]: Normalized probabilities of every local level.
        """
        self.move_orthogonality_center(site)
        tensor = self.tensors[site]
        weights = np.sum(np.abs(tensor) ** 2, axis=(1, 2))
        total = np.sum(weights)
        if total == 0:
            msg = "Cannot compute probabilities of a state with zero norm."
            raise ValidationError(msg)
        return weights / total

    def expect_diagonal(self, diagonals: Mapping[int, NDArray[np.float64]]) -> np.float64:
        """Expectation value of a product of diagonal single-site operators.

        Args:
            diagonals: Mapping from storage index to the diagonal of the operator acting on that site. Sites that
                are absent carry the identity.

        Returns:
            np.float64: <psi| prod_i D_i |psi> / <psi|psi>.
        """
        env = np.ones((1, 1), dtype=complex)
        norm_env = np.ones((1, 1), dtype=complex)
        for site, tensor in enumerate(self.tensors):
            diagonal = diagonals.get(site)
            if diagonal is None:
                diagonal = np.ones(tensor.shape[0])
            env = oe.contract("ab, sac, s, sbd->cd", env, np.conj(tensor), diagonal, tensor)
            norm_env = oe.contract("ab, sac, sbd->cd", norm_env, np.conj(tensor), tensor)
        return np.float64(np.real(np.squeeze(env)) / np.real(np.squeeze(norm_env)))

    def get_schmidt_spectrum(self, bond: int) -> NDArray[np.float64]:
        """Compute Schmidt spectrum.

        Args:
            bond: Index of the bond between storage sites ``bond`` and ``bond + 1``.

        Returns:
            NDArray[np.float64]: The singular values across the bond in descending order.
        """
        if not 0 <= bond < self.length - 1:
            msg = f"Bond index {bond} out of range for an MPS of length {self.length}."
            raise ValidationError(msg)
        self.move_orthogonality_center(bond)
        tensor = self.tensors[bond]
        phys, left, right = tensor.shape
        theta_mat = tensor.reshape(phys * left, right)
        return np.linalg.svd(theta_mat, compute_uv=False)

    def get_entropy(self, bond: int, order: float = 1, threshold: float = 1e-16) -> np.float64:
        """Compute bipartite entanglement entropy.

        Order 1 gives the von Neumann entropy, order 0 the Hartley entropy (logarithm of the Schmidt rank) and
        any other order the Rényi entropy. Schmidt weights at or below ``threshold`` are ignored.

        Args:
            bond: Index of the bond between storage sites ``bond`` and ``bond + 1``.
            order: Rényi order.
            threshold: Weights at or below this value are dropped.

        Returns:
            np.float64: The entanglement entropy across the bond.
        """
        s_vec = self.get_schmidt_spectrum(bond)
        s2 = s_vec.astype(np.float64) ** 2
        norm = np.sum(s2)
        if norm == 0:
            return np.float64(0.0)
        p = s2 / norm
        p = p[p > threshold]
        if order == 1:
            return np.float64(-np.sum(p * np.log(p)))
        if order == 0:
            return np.float64(np.log(len(p)))
        return np.float64(np.log(np.sum(p**order)) / (1 - order))

    def check_if_valid_mps(self) -> None:
        """MPS validity check.

        Every tensor must be rank 3 with the declared physical dimension. Neighbouring bonds must agree and the
        boundary bonds must be trivial.

        Raises:
            ValidationError: If a tensor has the wrong shape or two neighbouring bonds disagree.
        """
        for site, tensor in enumerate(self.tensors):
            if tensor.ndim != 3 or tensor.shape[0] != self.physical_dimensions[site]:
                msg = (
                    f"Tensor at site {site} has shape {tensor.shape}, expected (d={self.physical_dimensions[site]}, "
                    "left, right)."
                )
                raise ValidationError(msg)
        if self.tensors[0].shape[1] != 1 or self.tensors[-1].shape[2] != 1:
            msg = "Boundary bonds of an MPS must have dimension 1."
            raise ValidationError(msg)
        right_bond = self.tensors[0].shape[2]
        for site, tensor in enumerate(self.tensors[1:], start=1):
            if tensor.shape[1] != right_bond:
                msg = f"Bond mismatch at site {site}: {right_bond} != {tensor.shape[1]}."
                raise ValidationError(msg)
            right_bond = tensor.shape[2]

    def to_vec(self) -> NDArray[np.complex128]:
        r"""Converts the MPS to a full state vector representation.

        The first storage site is the most significant digit of the basis index.

        Returns:
                A one-dimensional NumPy array of length \(\prod_{\ell=1}^L d_\ell\)
                representing the state vector.
        """
        vec = self.tensors[0][:, 0, :]
        for tensor in self.tensors[1:]:
            # (..., chi_i) x (d, chi_i, chi_i+1) -> (..., d, chi_i+1)
            vec = np.tensordot(vec, tensor, axes=([-1], [1]))
            vec = np.reshape(vec, (-1, vec.shape[-1]))
        return np.squeeze(vec, axis=-1).flatten()

    def _check_site(self, site: int) -> None:
        if not 0 <= site < self.length:
            msg = f"Site index {site} out of range for an MPS of length {self.length}."
            raise ValidationError(msg)
