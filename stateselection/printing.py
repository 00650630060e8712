# Copyright (C) 2024 Collimator, Inc.
# SPDX-License-Identifier: AGPL-3.0-only
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU Affero General Public License as published by the Free
# Software Foundation, version 3. This program is distributed in the hope that it
# will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU Affero General
# Public License for more details.  You should have received a copy of the GNU
# Affero General Public License along with this program. If not, see
# <https://www.gnu.org/licenses/>.

from typing import TYPE_CHECKING

import numpy as np

from .association import der_association, is_algebraic
from .error import InternalStateSelectionError

if TYPE_CHECKING:
    from .equation_graph import SortedEquationGraph

__all__ = [
    "format_equation",
    "format_sorted_equation_graph",
    "print_sorted_equation_graph",
]


def _number_of_original_equations(b_rev) -> int:
    # Original (non-differentiated) equations come first
    n = 0
    for k in b_rev:
        if k is not None:
            break
        n += 1
    return n


def format_equation(eq: int, bder: np.ndarray) -> str:
    base, order = int(bder[eq, 0]), int(bder[eq, 1])
    if order == 0:
        return f"eq.{eq}"
    if order == 1:
        return f"eq.{eq} = der(eq.{base})"
    return f"eq.{eq} = der{order}(eq.{base})"


def format_sorted_equation_graph(
    graph: "SortedEquationGraph", equations: bool = True
) -> str:
    """Information about the sorted equation graph in human readable form.
    If `equations` is False, the sorted equations are omitted."""
    A = graph.A
    a_rev = graph.a_rev
    names = graph.var_names
    bder = der_association(graph.B, _number_of_original_equations(graph.b_rev))
    lines = []

    nvx = len(graph.vx)
    lines.append(f"\n  Variables of _x vector (length={graph.nx}):")
    for i, vx in enumerate(graph.vx):
        line = f"     _x[{i}]: "
        if vx is None:
            line += "---      # integral of lambda variable"
        else:
            line += names[vx]
            if is_algebraic(vx, A, a_rev):
                line += "      # algebraic variable"
            elif a_rev[vx] is not None:
                vx_int_index = graph.vx_rev[a_rev[vx]]
                if vx_int_index is not None:
                    line += f"      # = der(_x[{vx_int_index}])"
                else:
                    line += f"      # error (integral {names[a_rev[vx]]} not stored in _x)"
        lines.append(line)
    for i in range(len(graph.vmue)):
        lines.append(f"     _x[{nvx + i}]: ---      # integral of mue variable")

    nvderx = len(graph.vderx)
    lines.append(f"\n  Variables of _der_x vector (length={graph.nx}):")
    for i, vderx in enumerate(graph.vderx):
        line = f"     _der_x[{i}]: "
        vx = graph.vx[i]
        if vderx is not None:
            line += names[vderx]
            if is_algebraic(vderx, A, a_rev):
                line += "     # lambda variable"
        elif vx is None:
            line += "---      # error: _x and _der_x elements are both dummies"
        elif is_algebraic(vx, A, a_rev):
            line += "---      # derivative of algebraic variable"
        else:
            der_vx = A[vx]
            if der_vx is None:
                line += f"---      # error: vx = {names[vx]}, but der(vx) is not defined"
            elif graph.vx_rev[der_vx] is not None:
                der_vx_index = graph.vx_rev[der_vx]
                line += f"---      # = _x[{der_vx_index}] = {names[graph.vx[der_vx_index]]}"
            else:
                line += "---      # error"
        lines.append(line)
    for i, emue in enumerate(graph.vmue):
        lines.append(
            f"     _der_x[{nvderx + i}]: ---      # mue variable associated with "
            f"equation {format_equation(emue, bder)}"
        )

    if equations:
        lines.append(
            f"\n  Sorted equations (length(_r) = {len(graph.er)}, nc = {graph.nc}):"
        )
        for i, (v0, v1) in enumerate(zip(graph.ider0n2, graph.ider1n1)):
            iderx = graph.vx_rev[v0]
            ix = graph.vx_rev[v1]
            lines.append(f"     _r[{i}]   = _der_x[{iderx}] - _x[{ix}]")

        for es, ev in zip(graph.e_sorted, graph.e_solved):
            if ev >= 0:
                lines.append(
                    f"     {names[ev]}   = < solved from {format_equation(es, bder)} >"
                )
            else:
                lines.append(
                    f"     _r[{-ev - 1}]   = < residue of {format_equation(es, bder)} >"
                )

        if graph.nx != len(graph.er):
            raise InternalStateSelectionError("length(_x) != length(_r)")
        if graph.nc > len(graph.er):
            raise InternalStateSelectionError("nc > length(_r)")

    return "\n".join(lines)


def print_sorted_equation_graph(graph: "SortedEquationGraph", equations: bool = True):
    """Print information about the sorted equation graph.
    If `equations` is False, the equations are not printed."""
    print(format_sorted_equation_graph(graph, equations=equations))
