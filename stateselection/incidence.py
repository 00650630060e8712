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

__all__ = ["incidence_from_expressions"]


def incidence_from_expressions(exprs, variables):
    """
    Build the incidence graph and the solvability graph of equations `expr = 0`.

    x(t).diff(t) - w(t)             -> g_origin [der(x), w], g_solvable [der(x), w]
    x(t)**2 + y(t)**2 - L**2        -> g_origin [x, y],      g_solvable []
    m*w(t).diff(t) + x(t)*T(t)      -> g_origin [der(w), x, T], g_solvable []

    A variable is solvable from an equation if it appears linearly with a
    nonzero numeric coefficient, so solving for it needs no division by a
    quantity that could become zero.

    Parameters
    ----------
    exprs : list of sympy.Expr
        The equations of the system in the `0 = expr` form.
    variables : list
        The unknowns (symbols, functions of time or their derivatives). The
        position in this list is the variable index.

    Returns
    -------
    g_origin : list of list of int
        `g_origin[i]` are the indices of the variables appearing in `exprs[i]`.
    g_solvable : list of list of int
        `g_solvable[i]` is the subset of `g_origin[i]` that can be solved for.
    """
    # xreplace matches top-down, so der(x) is replaced before x inside it
    dummies = [sp.Dummy(f"v{idx}") for idx in range(len(variables))]
    true_to_dummy = dict(zip(variables, dummies))

    g_origin = []
    g_solvable = []
    for expr in exprs:
        dummy_expr = sp.sympify(expr).xreplace(true_to_dummy)
        free = dummy_expr.free_symbols

        vars_in_eq = [idx for idx, d in enumerate(dummies) if d in free]
        solvable = []
        for idx in vars_in_eq:
            coeff = sp.diff(dummy_expr, dummies[idx])
            if coeff.is_number and coeff != 0:
                solvable.append(idx)

        g_origin.append(vars_in_eq)
        g_solvable.append(solvable)

    return g_origin, g_solvable
