# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Text rendering of circuits.

Circuits are drawn with time running downwards and one column per physical site. A Pauli-X gate on a
StaircaseRight(1) pointer of an open three-site chain, repeated for two steps, renders as

    Circuit (L=3, bc=open, seed=0)

          q1 q2 q3
      1: ┤X├──────
      2: ───┤X├───

Steps with several gates are split into lettered sub-rows. A multi-site gate shows its label on its smallest site
and empty boxes on the others. The renderer only consumes ``expand_circuit`` and never draws random numbers itself.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from ..circuits.expansion import expand_circuit

if TYPE_CHECKING:
    from typing import TextIO

    from ..circuits.circuit import Circuit
    from ..circuits.expansion import ExpandedOp
    from ..core.data_structures.rng_registry import RNGRegistry


def _row_suffix(index: int) -> str:
    """Letter suffix of the index-th sub-row: a, b, ..., z, aa, ab, ..."""
    suffix = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        suffix = chr(ord("a") + remainder) + suffix
    return suffix


def render_circuit(circuit: Circuit, seed: int = 0, *, unicode: bool = True, rng: RNGRegistry | None = None) -> str:
    """Renders a circuit as text.

    Args:
        circuit: The circuit to draw.
        seed: Seed of the expansion.
        unicode: Use box-drawing characters instead of plain ASCII.
        rng: Registry used instead of ``seed`` for the expansion.

    Returns:
        str: The drawing, ending with a newline.
    """
    wire = "─" if unicode else "-"
    left_box = "┤" if unicode else "|"
    right_box = "├" if unicode else "|"

    expanded = expand_circuit(circuit, seed, rng=rng)
    rows: list[tuple[str, ExpandedOp | None]] = []
    for step_idx, ops in enumerate(expanded, start=1):
        if not ops:
            rows.append((f"{step_idx}:", None))
        elif len(ops) == 1:
            rows.append((f"{step_idx}:", ops[0]))
        else:
            rows.extend((f"{step_idx}{_row_suffix(k)}:", op) for k, op in enumerate(ops))

    max_label = max([len(op.label) for _, op in rows if op is not None], default=1)
    col_width = max_label + 2
    label_width = max(max(len(label) for label, _ in rows) + 2, 5)

    def box(text: str) -> str:
        if not text:
            return left_box + wire * (col_width - 2) + right_box
        padding = col_width - len(text) - 2
        left = padding // 2
        return left_box + wire * left + text + wire * (padding - left) + right_box

    lines = [f"Circuit (L={circuit.length}, bc={circuit.boundary_condition.value}, seed={seed})", ""]
    lines.append(" " * label_width + "".join(f"q{q}".rjust(col_width) for q in range(1, circuit.length + 1)))
    for row_label, op in rows:
        cells = []
        for q in range(1, circuit.length + 1):
            if op is None or q not in op.sites:
                cells.append(wire * col_width)
            elif q == min(op.sites):
                cells.append(box(op.label))
            else:
                cells.append(box(""))
        lines.append(row_label.rjust(label_width - 1) + " " + "".join(cells))
    return "\n".join(lines) + "\n"


def print_circuit(
    circuit: Circuit,
    seed: int = 0,
    file: TextIO | None = None,
    *,
    unicode: bool = True,
    rng: RNGRegistry | None = None,
) -> None:
    """Prints :func:`render_circuit` to ``file`` (standard output by default)."""
    out = file if file is not None else sys.stdout
    out.write(render_circuit(circuit, seed, unicode=unicode, rng=rng))
