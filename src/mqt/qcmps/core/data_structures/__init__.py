# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Data structures: boundary permutations, RNG streams, the MPS chain and the simulation state."""
