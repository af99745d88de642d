# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""QCMPS init file.

QCMPS (Quantum Circuits on Matrix Product States), a part of the Munich Quantum Toolkit (MQT),
is a package to describe monitored quantum circuits symbolically, render them, and execute them
reproducibly on bounded-rank matrix product states.
"""

from __future__ import annotations

from ._version import version as __version__
from ._version import version_tuple as version_info

__all__ = ["__version__", "version_info"]
