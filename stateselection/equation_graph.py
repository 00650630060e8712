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

"""
Transformation of the ODAE produced by Pantelides to a special index-1 DAE,
using the static dummy derivative method with tearing to select dummy states
and a generalization of the Gear-Gupta-Leimkuhler stabilization of multibody
systems to handle the remaining potential states (that would otherwise be
treated with the dynamic dummy derivative method).

Otter, M. and Elmqvist, H., 2017. Transformation of Differential Algebraic
Array Equations to Index One Form. Proceedings of the 12th International
Modelica Conference.

Mattsson, S.E. and Söderlind, G., 1993. Index reduction in
differential-algebraic equations using dummy derivatives.
SIAM Journal on Scientific Computing, 14(3), pp.677-692.
"""

import dataclasses
import json
from typing import Optional, Sequence

from .association import deduce_higher, revert_association
from .constraint_sets import (
    get_constraint_sets,
    has_lower_derivative_equations,
    unknowns_per_level,
)
from .error import (
    GraphConsumedError,
    InternalStateSelectionError,
    ModelStructureError,
    StabilizationError,
)
from .logging import logdata, logger, scope_logging
from .printing import format_sorted_equation_graph
from .tearing import DefaultTearing
from .types import Association, IncidenceGraph, ResidualCategory, Tearing

__all__ = [
    "EquationGraph",
    "SortedEquationGraph",
    "get_sorted_equation_graph",
]


@dataclasses.dataclass(frozen=True)
class SortedEquationGraph:
    """
    The sorted equation graph with the selection of states and dummy states.

    All equation and variable indices are 0-based. Residue code generated from
    this graph must contain `_r[0:len(ider0n2)] = _der_x[..] - _x[..]`, see
    `ider0n2`/`ider1n1`.

    Attributes:
        e_sorted: Sorted equations (equations must be generated in the order
            e_sorted[0], e_sorted[1], ...).
        e_solved: If e_solved[i] >= 0, equation e_sorted[i] is explicitly solved
            for variable e_solved[i]. If e_solved[i] < 0, equation e_sorted[i]
            is a residue equation computing _r[-e_solved[i] - 1].
        vx: Variable j = vx[i] is part of vector x; if j is None, this element
            of x is a dummy variable (do not use in model code).
        vx_rev: If vx_rev[j] = i, then vx[i] = j; if None, variable j is not
            part of x.
        vderx: Variable j = vderx[i] is part of vector der_x; if j is None,
            this element of der_x is a dummy variable.
        vderx_rev: If vderx_rev[j] = i, then vderx[i] = j; if None, variable j
            is not part of der_x.
        vmue: Equation j = vmue[i] is the equation associated with mue[i].
        er: If er[i] = k, the residue of equation e_sorted[k] is _r[i]; if None,
            _r[i] is one of the ider0n2/ider1n1 identities.
        ider0n2, ider1n1: For every i, _r[i] = _der_x[vx_rev[ider0n2[i]]] -
            _x[vx_rev[ider1n1[i]]].
        residues: Positions in e_sorted of the residues of every category.
        nc: Number of residue constraints, i.e. the part of the residue that
            depends on (x, t) but not on der(x); 0 <= nc <= len(er).
        nmue: Number of mue variables.
    """

    e_sorted: list
    e_solved: list
    vx: list
    vx_rev: list
    vderx: list
    vderx_rev: list
    vmue: list
    er: list
    ider0n2: list
    ider1n1: list
    residues: dict
    nc: int
    nmue: int

    # Structural information needed to interpret the graph
    A: list
    B: list
    a_rev: list
    b_rev: list
    var_names: list
    e_algebraic: list
    v_algebraic: list
    e_constraints: list
    v_constraints: list
    ignored_blocks: list

    @property
    def nx(self) -> int:
        """Length of the x vector, including the integrals of the mue variables."""
        return len(self.vx) + len(self.vmue)

    def residue_index(self, i: int) -> Optional[int]:
        """Index in _r of the residue of e_sorted[i], None if it is solved."""
        ev = self.e_solved[i]
        return -ev - 1 if ev < 0 else None

    def to_dict(self) -> dict:
        d = dataclasses.asdict(self)
        d["residues"] = {cat.name: list(pos) for cat, pos in self.residues.items()}
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


class EquationGraph:
    """
    Initialized data structure to determine the sorted equation graph.

    An EquationGraph can be sorted exactly once: `sort()` consumes it and
    returns an immutable `SortedEquationGraph`.

    Parameters:
        g_origin: `g_origin[i]` is the list of variable indices of equation `i`.
        blt: `blt[i]` is the list of equations belonging to BLT block `i`.
        assign: `assign[v]` is the equation assigned to variable `v`.
        A: A-vector of Pantelides, `A[i] = k` if `der(v[i]) == v[k]` else None.
        B: B-vector of Pantelides, `B[i] = k` if `der(e[i]) == e[k]` else None.
        var_names: `var_names[i]` is the name of variable `i` (only used for
            diagnostics).
    """

    def __init__(
        self,
        g_origin: IncidenceGraph,
        blt: Sequence[Sequence[int]],
        assign: Association,
        A: Association,
        B: Association,
        var_names: Sequence[str],
    ):
        nv = len(var_names)
        ne = len(g_origin)
        if len(assign) != nv:
            raise ModelStructureError(
                f"assign has length {len(assign)}, but there are {nv} variables."
            )
        if len(A) != nv:
            raise ModelStructureError(
                f"A has length {len(A)}, but there are {nv} variables."
            )
        if len(B) != ne:
            raise ModelStructureError(
                f"B has length {len(B)}, but there are {ne} equations."
            )
        for eq, vars_in_eq in enumerate(g_origin):
            bad = [v for v in vars_in_eq if not 0 <= v < nv]
            if bad:
                raise ModelStructureError(
                    f"Equation references unknown variables {bad}.", equations=[eq]
                )
        for block in blt:
            bad = [eq for eq in block if not 0 <= eq < ne]
            if bad:
                raise ModelStructureError(f"BLT block references unknown equations {bad}.")

        self.ne = ne
        self.nv = nv
        self.g_origin = [list(vars_in_eq) for vars_in_eq in g_origin]
        self.assign = list(assign)
        self.A = list(A)
        self.B = list(B)
        self.var_names = list(var_names)

        # Revert association vectors
        self.a_rev = revert_association(self.A, nv)
        self.b_rev = revert_association(self.B, ne)
        self.e_assign = revert_association(self.assign, ne)

        # Sorted equations
        self.e_sorted = []
        self.e_solved = []
        self.residues = {cat: [] for cat in ResidualCategory}

        # Structure of x and der_x vectors
        self.vx = []
        self.vx_rev = [None] * nv
        self.vderx = []
        self.vderx_rev = [None] * nv
        self.vmue = []

        # Algebraic equations/variables
        self.e_algebraic = [False] * ne
        self.v_algebraic = [False] * nv

        # Equation/variable constraint sets of every BLT block, from lowest to
        # highest differentiation order (e_constraints[-1] is the block).
        # g_unknowns[eq] are the variables of eq that are treated as unknowns.
        self.g_unknowns = [[] for _ in range(ne)]
        self.e_constraints_vec = []
        self.v_constraints_vec = []
        self.ignored_blocks = []

        for ib, block in enumerate(blt):
            # Ignore blocks with lower derivative equations
            if has_lower_derivative_equations(block, self.B):
                self.ignored_blocks.append(ib)
                continue

            e_constraints, v_constraints = get_constraint_sets(
                block, self.e_assign, self.a_rev, self.b_rev
            )
            logger.debug(
                "Constraint sets of BLT block %d: %s with unknowns %s",
                ib,
                e_constraints,
                v_constraints,
                **logdata(equations=block),
            )
            self.e_constraints_vec.append(e_constraints)
            self.v_constraints_vec.append(v_constraints)

            for eq, unknowns in unknowns_per_level(
                self.g_origin, e_constraints, v_constraints
            ).items():
                self.g_unknowns[eq] = unknowns

        if self.ignored_blocks:
            logger.debug(
                "BLT blocks %s with lower derivative equations have been ignored.",
                self.ignored_blocks,
            )

        self._consumed = False

    def determine_algebraic_property(self, ec: Sequence[int]):
        """
        Determine whether all equations `ec` contain only algebraic variables.
        If yes, mark this in `e_algebraic` and `v_algebraic`.
        """
        if len(ec) == 0:
            raise InternalStateSelectionError(
                "empty constraint set in algebraic property detection."
            )

        for eq in ec:
            for v in self.g_origin[eq]:
                if self.A[v] is not None or self.a_rev[v] is not None:
                    # v is not an algebraic variable
                    return

        for eq in ec:
            self.e_algebraic[eq] = True
            for v in self.g_origin[eq]:
                self.v_algebraic[v] = True

    def _push_state(self, vx: Optional[int], vderx: Optional[int]):
        self.vx.append(vx)
        self.vderx.append(vderx)
        if vx is not None:
            self.vx_rev[vx] = len(self.vx) - 1
        if vderx is not None:
            self.vderx_rev[vderx] = len(self.vderx) - 1

    def append_to_sorted_equations(
        self,
        e_solved: Sequence[int],
        v_solved: Sequence[int],
        e_residue: Sequence[int],
        v_tear: Sequence[int],
        highest_derivative: bool,
    ):
        """
        Append `e_solved` and `e_residue` to the sorted equations, store the
        `v_solved` variables appropriately and store the tearing variables
        `v_tear` in the x or der_x vectors.
        """
        # Solved equations, in the order given by tearing
        for es, vs in zip(e_solved, v_solved):
            self.e_sorted.append(es)

            if (
                highest_derivative
                and self.b_rev[es] is None
                and self.a_rev[vs] is not None
            ):
                # Highest derivative equation that is not differentiated and
                # vs is a derivative -> change solved equation to residue
                self.e_solved.append(None)
                self.residues[ResidualCategory.RD].append(len(self.e_sorted) - 1)
                vs_int = self.a_rev[vs]
                if self.vx_rev[vs_int] is None:
                    self._push_state(vs_int, vs)
            else:
                # Algebraic or constraint equation -> explicitly solved
                self.e_solved.append(vs)

        for er in e_residue:
            self.e_sorted.append(er)
            self.e_solved.append(None)

            if highest_derivative:
                cat = (
                    ResidualCategory.RA
                    if self.e_algebraic[er]
                    else ResidualCategory.RD
                )
            elif self.b_rev[er] is None:
                cat = ResidualCategory.RDER0
            else:
                cat = ResidualCategory.RDER1
            self.residues[cat].append(len(self.e_sorted) - 1)

            if cat == ResidualCategory.RDER1:
                # mue variable associated with er
                self.vmue.append(er)

        for vt in v_tear:
            if highest_derivative:
                if self.v_algebraic[vt]:
                    # algebraic unknown -> part of x
                    self._push_state(vt, None)
                elif self.a_rev[vt] is None:
                    # not a differentiated variable -> lambda, part of der_x
                    self._push_state(None, vt)
                else:
                    # differentiated variable -> its integral is part of x
                    vt_int = self.a_rev[vt]
                    if self.vx_rev[vt_int] is None:
                        self._push_state(vt_int, vt)
            else:
                # Lower derivative constraint equation
                der_vt = self.A[vt]
                if der_vt is not None and self.A[der_vt] is None:
                    # der(vt) is the highest derivative variable
                    self._push_state(vt, der_vt)
                else:
                    self._push_state(vt, None)

    def _finalize(self) -> SortedEquationGraph:
        # ider0n2/ider1n1: vx whose second derivative exists, so der(vx) is in x
        ider0n2 = []
        ider1n1 = []
        for vx in self.vx:
            if vx is None:
                continue
            der_vx = self.A[vx]
            if der_vx is not None and self.A[der_vx] is not None:
                ider0n2.append(vx)
                ider1n1.append(der_vx)

        er = [None] * len(ider0n2)
        for cat in (
            ResidualCategory.RD,
            ResidualCategory.RA,
            ResidualCategory.RDER0,
            ResidualCategory.RDER1,
        ):
            er.extend(self.residues[cat])

        for i in range(len(ider0n2), len(er)):
            self.e_solved[er[i]] = -(i + 1)

        nc = (
            len(self.residues[ResidualCategory.RA])
            + len(self.residues[ResidualCategory.RDER0])
            + len(self.residues[ResidualCategory.RDER1])
        )
        nmue = len(self.vmue)

        if len(self.vx) != len(self.vderx):
            raise InternalStateSelectionError(
                f"length(_x) = {len(self.vx)} != length(_der_x) = {len(self.vderx)}"
            )
        if len(self.vx) + nmue != len(er):
            raise InternalStateSelectionError(
                f"length(_x) = {len(self.vx) + nmue} != length(_r) = {len(er)}"
            )
        if nc > len(er):
            raise InternalStateSelectionError(f"nc = {nc} > length(_r) = {len(er)}")
        if self.residues[ResidualCategory.RDERN]:
            # highest level constraints are sorted as RD/RA and have no slot in _r
            raise InternalStateSelectionError(
                "residues of category RDERN are not placed in the residue vector.",
                equations=[self.e_sorted[i] for i in self.residues[ResidualCategory.RDERN]],
            )

        return SortedEquationGraph(
            e_sorted=self.e_sorted,
            e_solved=self.e_solved,
            vx=self.vx,
            vx_rev=self.vx_rev,
            vderx=self.vderx,
            vderx_rev=self.vderx_rev,
            vmue=self.vmue,
            er=er,
            ider0n2=ider0n2,
            ider1n1=ider1n1,
            residues=self.residues,
            nc=nc,
            nmue=nmue,
            A=self.A,
            B=self.B,
            a_rev=self.a_rev,
            b_rev=self.b_rev,
            var_names=self.var_names,
            e_algebraic=self.e_algebraic,
            v_algebraic=self.v_algebraic,
            e_constraints=self.e_constraints_vec,
            v_constraints=self.v_constraints_vec,
            ignored_blocks=self.ignored_blocks,
        )

    @scope_logging
    def sort(
        self, g_solvable: IncidenceGraph, tearing: Optional[Tearing] = None
    ) -> SortedEquationGraph:
        """
        Construct the sorted equation graph.

        Parameters:
            g_solvable: `g_solvable[i]` is the subset of the unknowns of
                equation `i` that can be solved for (used for tearing). Only
                needed for the non-differentiated equations; differentiated
                equations may have `g_solvable[j] = []`.
            tearing: Tearing callable, defaults to `DefaultTearing`.
        """
        if self._consumed:
            raise GraphConsumedError(
                "EquationGraph.sort() has been called twice on the same object. "
                "Instantiate an EquationGraph once for every sort."
            )
        self._consumed = True

        if len(g_solvable) != self.ne:
            raise ModelStructureError(
                f"g_solvable has length {len(g_solvable)}, but there are "
                f"{self.ne} equations."
            )
        if tearing is None:
            tearing = DefaultTearing(self.g_unknowns, self.nv)

        e_solved_fixed_highest = []
        v_solved_fixed_highest = []
        v_tear_fixed_highest = []
        e_constraints_highest = []
        v_constraints_highest = []

        for j, (e_constraints, v_constraints) in enumerate(
            zip(self.e_constraints_vec, self.v_constraints_vec)
        ):
            n_levels = len(e_constraints)
            e_solved, v_solved, e_residue, v_tear = [], [], [], []

            # From lowest-order to highest-order derivatives
            for i in range(n_levels):
                ec = e_constraints[i]
                vc = v_constraints[i]
                if i > 0:
                    # ec is the derivative of the previous level + potentially
                    # additional equations
                    e_solved_fixed = deduce_higher(e_solved, self.B)
                    v_solved_fixed = deduce_higher(v_solved, self.A)
                    v_tear_fixed = deduce_higher(v_tear, self.A)

                if i == n_levels - 1:
                    # Highest derivative equations
                    if i > 0:
                        if e_residue:
                            # Remove differentiated residues of the previous level
                            e_residue_fixed = set(deduce_higher(e_residue, self.B))
                            ec = [eq for eq in ec if eq not in e_residue_fixed]
                        e_solved_fixed_highest.extend(e_solved_fixed)
                        v_solved_fixed_highest.extend(v_solved_fixed)
                        v_tear_fixed_highest.extend(v_tear_fixed)
                    else:
                        # Original, undifferentiated equations
                        self.determine_algebraic_property(ec)
                    e_constraints_highest.extend(ec)
                    v_constraints_highest.extend(vc)
                else:
                    # Constraint equations, but not on the highest level
                    if i == 0:
                        result = tearing(g_solvable, ec, vc)
                    else:
                        result = tearing(
                            g_solvable,
                            ec,
                            vc,
                            e_solved_fixed=e_solved_fixed,
                            v_solved_fixed=v_solved_fixed,
                            v_tear_fixed=v_tear_fixed,
                        )
                    e_solved, v_solved, e_residue, v_tear = result
                    logger.debug(
                        "Constraint level torn: solved %s for %s, residues %s, "
                        "tearing variables %s",
                        e_solved,
                        v_solved,
                        e_residue,
                        v_tear,
                        **logdata(block=j, level=i),
                    )
                    self.append_to_sorted_equations(
                        e_solved, v_solved, e_residue, v_tear, False
                    )

        # Tear equations on the highest derivative level of all blocks together
        result = tearing(
            g_solvable,
            e_constraints_highest,
            v_constraints_highest,
            e_solved_fixed=e_solved_fixed_highest,
            v_solved_fixed=v_solved_fixed_highest,
            v_tear_fixed=v_tear_fixed_highest,
        )
        logger.debug(
            "Highest derivative level torn: solved %s for %s, residues %s, "
            "tearing variables %s",
            *result,
        )
        self.append_to_sorted_equations(*result, True)

        graph = self._finalize()
        logger.info(
            "Sorted %d equations: %d states, %d residues, nc = %d, nmue = %d.",
            len(graph.e_sorted),
            len(graph.vx),
            len(graph.er),
            graph.nc,
            graph.nmue,
        )
        return graph


def get_sorted_equation_graph(
    g_origin: IncidenceGraph,
    g_solvable: IncidenceGraph,
    blt: Sequence[Sequence[int]],
    assign: Association,
    A: Association,
    B: Association,
    var_names: Sequence[str],
    *,
    with_stabilization: bool = True,
    tearing: Optional[Tearing] = None,
) -> SortedEquationGraph:
    """
    Return the sorted equation graph with the selection of states and dummy
    states.

    Parameters:
        g_origin: `g_origin[i]` is the list of variable indices of equation `i`.
        g_solvable: `g_solvable[i]` is the subset of `g_origin[i]` that can be
            explicitly solved for (used for tearing). Only needed for the
            non-differentiated equations.
        blt: `blt[i]` is the list of equations belonging to BLT block `i`.
        assign: `assign[v]` is the equation assigned to variable `v`.
        A: A-vector of Pantelides, `A[i] = k` if `der(v[i]) == v[k]` else None.
        B: B-vector of Pantelides, `B[i] = k` if `der(e[i]) == e[k]` else None.
        var_names: `var_names[i]` is the name of variable `i`.
        with_stabilization: If False, a StabilizationError is raised if the DAE
            requires stabilization (mue variables).
        tearing: Tearing callable, defaults to `DefaultTearing`.

    Returns:
        SortedEquationGraph
    """
    eq_graph = EquationGraph(g_origin, blt, assign, A, B, var_names)
    graph = eq_graph.sort(g_solvable, tearing=tearing)

    if not with_stabilization and graph.nmue > 0:
        logger.error(
            "State selection requires stabilization:\n%s",
            format_sorted_equation_graph(graph, equations=False),
        )
        constraint_variables = [graph.var_names[v] for v in graph.ider1n1]
        raise StabilizationError(
            "Automatic state selection is not possible, because the code "
            "generator does not yet support the generation of stabilizing "
            f"equations.\n    Number of mue variables: {graph.nmue}\n"
            f"    The following (state) variables are the reason: "
            f"{constraint_variables}.",
            graph=graph,
            variables=constraint_variables,
            equations=graph.vmue,
        )

    return graph
