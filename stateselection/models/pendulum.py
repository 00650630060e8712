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

import sympy as sp

from ..incidence import incidence_from_expressions
from ..model_json import StructuralModel


def pendulum(include_lower_blocks: bool = True) -> StructuralModel:
    """
    Index-3 pendulum in cartesian coordinates after Pantelides.

    Original equations:
    e0: der(x) = vx
    e1: der(y) = vy
    e2: m*der(vx) = -x*lam/L
    e3: m*der(vy) = -y*lam/L - m*g
    e4: x² + y² = L²

    Pantelides differentiates the position constraint twice (e5 = der(e4),
    e6 = der(e5)) and the kinematic equations once (e7 = der(e0),
    e8 = der(e1)), introducing der2(x) and der2(y).

    Variables:
    0: x, 1: y, 2: vx, 3: vy, 4: lam, 5: der(x), 6: der(y), 7: der(vx),
    8: der(vy), 9: der2(x), 10: der2(y)

    Parameters:
        include_lower_blocks: If True, the BLT ordering also lists the
            differentiated (lower derivative) equations as blocks of their
            own. These blocks are ignored by the state selection.
    """
    t = sp.symbols("t")
    m, L, g = sp.symbols("m L g")
    x, y, vx, vy, lam = (
        sp.Function(name)(t) for name in ("x", "y", "vx", "vy", "lam")
    )

    e0 = x.diff(t) - vx
    e1 = y.diff(t) - vy
    e2 = m * vx.diff(t) + x * lam / L
    e3 = m * vy.diff(t) + y * lam / L + m * g
    e4 = x**2 + y**2 - L**2
    e5 = e4.diff(t)
    e6 = e5.diff(t)
    e7 = e0.diff(t)
    e8 = e1.diff(t)
    exprs = [e0, e1, e2, e3, e4, e5, e6, e7, e8]

    variables = [
        x,
        y,
        vx,
        vy,
        lam,
        x.diff(t),
        y.diff(t),
        vx.diff(t),
        vy.diff(t),
        x.diff(t, 2),
        y.diff(t, 2),
    ]
    var_names = [
        "x",
        "y",
        "vx",
        "vy",
        "lam",
        "der(x)",
        "der(y)",
        "der(vx)",
        "der(vy)",
        "der(der(x))",
        "der(der(y))",
    ]

    g_origin, g_solvable = incidence_from_expressions(exprs, variables)

    A = [5, 6, 7, 8, None, 9, 10, None, None, None, None]
    B = [7, 8, None, None, 5, 6, None, None, None]

    # Matching of the highest derivative variables
    assign = [None] * len(variables)
    assign[4] = 2  # lam <- e2
    assign[8] = 3  # der(vy) <- e3
    assign[9] = 6  # der2(x) <- e6
    assign[7] = 7  # der(vx) <- e7
    assign[10] = 8  # der2(y) <- e8

    blt = [[2, 3, 6, 7, 8]]
    if include_lower_blocks:
        blt = [[4], [5], [0], [1]] + blt

    return StructuralModel(
        g_origin=g_origin,
        blt=blt,
        assign=assign,
        A=A,
        B=B,
        var_names=var_names,
        g_solvable=g_solvable,
    )
