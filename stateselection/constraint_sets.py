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

from typing import Sequence

from .error import InternalStateSelectionError, ModelStructureError
from .types import Association, IncidenceGraph

__all__ = [
    "get_constraint_sets",
    "unknowns_per_level",
    "has_lower_derivative_equations",
]


def has_lower_derivative_equations(e_blt: Sequence[int], B: Association) -> bool:
    """True if an equation of the BLT block has been differentiated. Such a block
    is already covered by the constraint chain of its derivative."""
    return any(B[eq] is not None for eq in e_blt)


def get_constraint_sets(
    e_blt: Sequence[int],
    e_assign: Association,
    a_rev: Association,
    b_rev: Association,
) -> tuple[list[list[int]], list[list[int]]]:
    """
    Determine the constraint equation sets and their unknowns for a BLT block.

    Parameters:
        e_blt: Equation indices of the BLT block.
        e_assign: `e_assign[eq]` is the variable assigned to equation `eq`.
        a_rev: Reverted variable association, `a_rev[i] = k` if `der(v[k]) == v[i]`.
        b_rev: Reverted equation association, `b_rev[i] = k` if `der(e[k]) == e[i]`.

    Returns:
        e_constraints: `e_constraints[0]` are the lowest-order constraint
            equations, `e_constraints[-1]` is `e_blt`.
        v_constraints: `v_constraints[i]` are the unknowns of `e_constraints[i]`.
    """
    v_blt = []
    for eq in e_blt:
        v = e_assign[eq]
        if v is None:
            raise ModelStructureError(
                "BLT block contains an equation without an assigned variable.",
                equations=[eq],
            )
        v_blt.append(v)

    e_constraints = [list(e_blt)]
    v_constraints = [v_blt]
    while True:
        # Constraints at one differentiation order less
        ceq = [b_rev[eq] for eq in e_constraints[0] if b_rev[eq] is not None]
        if len(ceq) == 0:
            break

        veq = [a_rev[vc] for vc in v_constraints[0] if a_rev[vc] is not None]
        if len(veq) == 0:
            raise InternalStateSelectionError(
                "equations and variables of a BLT block have different "
                "differentiation orders.",
                equations=list(e_blt),
            )

        e_constraints.insert(0, ceq)
        v_constraints.insert(0, veq)

    if len(e_constraints) != len(v_constraints):
        raise InternalStateSelectionError(
            f"{len(e_constraints)} equation sets but {len(v_constraints)} "
            "variable sets in constraint chain.",
            equations=list(e_blt),
        )
    return e_constraints, v_constraints


def unknowns_per_level(
    g_origin: IncidenceGraph,
    e_constraints: list[list[int]],
    v_constraints: list[list[int]],
) -> dict[int, list[int]]:
    """Unknowns of every constraint equation: the variables of the equation that
    belong to the unknowns of its own differentiation level."""
    g_unknowns = {}
    for ec, vc in zip(e_constraints, v_constraints):
        level_vars = set(vc)
        for eq in ec:
            g_unknowns[eq] = [v for v in g_origin[eq] if v in level_vars]
    return g_unknowns
