# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Error taxonomy.

All errors raised by QCMPS derive from :class:`QCMPSError`. They additionally subclass ``ValueError`` because every
one of them reports an invalid value handed in by the caller (a length, a probability, a site, a stream name).

- :class:`ConfigurationError` is raised while constructing a state, registry or circuit with incompatible settings
  (unknown boundary condition, odd length under periodic boundary, missing RNG seed).
- :class:`ValidationError` is raised when a recorded operation is malformed (probability sum, empty outcome list,
  unknown RNG stream) and, through :class:`ArityError`, when a gate and a geometry disagree on the number of sites.
- :class:`ResolutionError` is raised when a geometry cannot be resolved to sites of the chain at a given step.
"""

from __future__ import annotations


class QCMPSError(ValueError):
    """Base class of every error raised by QCMPS."""


class ConfigurationError(QCMPSError):
    """Invalid construction-time configuration."""


class ValidationError(QCMPSError):
    """A recorded operation or a call argument failed validation."""


class ArityError(ValidationError):
    """The support of a gate does not match the site-groups produced by its geometry."""


class ResolutionError(QCMPSError):
    """A geometry could not be resolved to valid sites.

    Attributes:
        geometry: The geometry that failed to resolve.
        step: The circuit step at which resolution was attempted (``None`` outside of a circuit).
    """

    def __init__(self, msg: str, geometry: object = None, step: int | None = None) -> None:
        """Initializes the error with the offending geometry and step.

        Args:
            msg: Human readable description.
            geometry: The geometry that failed to resolve.
            step: The step index at which the failure occurred.
        """
        if step is not None:
            msg = f"{msg} (geometry {geometry!r} at step {step})"
        elif geometry is not None:
            msg = f"{msg} (geometry {geometry!r})"
        super().__init__(msg)
        self.geometry = geometry
        self.step = step
