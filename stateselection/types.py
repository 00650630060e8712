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

from enum import IntEnum
from typing import NamedTuple, Optional, Protocol, Sequence

__all__ = [
    "Association",
    "IncidenceGraph",
    "ResidualCategory",
    "TearingResult",
    "Tearing",
]

# Association[i] = j relates element i to element j, None means "no relation".
# Used for the A and B vectors of Pantelides and for the variable assignment.
Association = Sequence[Optional[int]]

# IncidenceGraph[eq] is the list of variable indices referenced by equation eq
IncidenceGraph = Sequence[Sequence[int]]


class ResidualCategory(IntEnum):
    """Categories of residual equations. The order of the members is the order
    in which the residues are placed in the residue vector (after the trivial
    `der_x - x` identities).

    - `RD`: Original, non-differentiated equation with derivative variables as
      unknowns and no constraints.
    - `RA`: Original, non-differentiated algebraic equation (only algebraic
      variables in the equation) and no constraints.
    - `RDER0`: Constraint equation that is not differentiated.
    - `RDER1`: Constraint equation that is differentiated at least once, but is
      not on the highest derivative level. A mue variable is associated with
      every equation of this category.
    - `RDERN`: Constraint equation on the highest derivative level. Never
      assigned: these equations are handled as `RD`/`RA` together with all
      other highest derivative equations.
    """

    RD = 0
    RA = 1
    RDER0 = 2
    RDER1 = 3
    RDERN = 4


class TearingResult(NamedTuple):
    # e_solved[i] is explicitly solved for v_solved[i], in evaluation order
    e_solved: list
    v_solved: list
    # equations that remain residues
    e_residue: list
    # unknowns that are not solved for (tearing variables)
    v_tear: list


class Tearing(Protocol):
    """Partitions equations `es` with unknowns `vs` into explicitly solved
    equations and residues.

    `g_solvable[eq]` are the unknowns of `eq` that can be solved for without
    changing the solution space (only required for non-differentiated
    equations). `e_solved_fixed`/`v_solved_fixed` are pairs that must be kept
    as solved, `v_tear_fixed` are unknowns that must not be solved for.
    """

    def __call__(
        self,
        g_solvable: IncidenceGraph,
        es: Sequence[int],
        vs: Sequence[int],
        *,
        e_solved_fixed: Sequence[int] = (),
        v_solved_fixed: Sequence[int] = (),
        v_tear_fixed: Sequence[int] = (),
    ) -> TearingResult: ...
