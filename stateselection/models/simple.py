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


def scalar_ode(a=1.0) -> StructuralModel:
    """der(x) + a*x = 0, with variables 0: x, 1: der(x)."""
    t = sp.symbols("t")
    x = sp.Function("x")(t)
    variables = [x, x.diff(t)]
    g_origin, g_solvable = incidence_from_expressions(
        [x.diff(t) + a * x], variables
    )
    return StructuralModel(
        g_origin=g_origin,
        blt=[[0]],
        assign=[None, 0],
        A=[1, None],
        B=[None],
        var_names=["x", "der(x)"],
        g_solvable=g_solvable,
    )


def explicit_equation() -> StructuralModel:
    """y = 1, a single explicitly solvable algebraic equation."""
    y = sp.symbols("y")
    g_origin, g_solvable = incidence_from_expressions([y - 1], [y])
    return StructuralModel(
        g_origin=g_origin,
        blt=[[0]],
        assign=[0],
        A=[None],
        B=[None],
        var_names=["y"],
        g_solvable=g_solvable,
    )


def algebraic_system() -> StructuralModel:
    """Nonlinear algebraic loop in y1, y2 that needs one torn variable.

    e0: y1 + y2 = 1
    e1: y1*y2 = 2
    """
    y1, y2 = sp.symbols("y1 y2")
    g_origin, g_solvable = incidence_from_expressions(
        [y1 + y2 - 1, y1 * y2 - 2], [y1, y2]
    )
    return StructuralModel(
        g_origin=g_origin,
        blt=[[0, 1]],
        assign=[0, 1],
        A=[None, None],
        B=[None, None],
        var_names=["y1", "y2"],
        g_solvable=g_solvable,
    )
