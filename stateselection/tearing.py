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
Default tearing of equation sets.

A set of equations `es` with unknowns `vs` is split into equations that are
explicitly solved for one unknown each, in a sequence where every equation only
depends on unknowns solved before it (or on tearing variables), and residue
equations. The explicitly solved equations form a directed acyclic graph (DAG):
an edge `e1 -> e2` means that `e2` references the unknown solved by `e1`.

Equations are visited in the given order and assigned greedily to the first
solvable unknown that keeps the graph acyclic.
"""

from typing import Sequence

import networkx as nx

from .error import InternalStateSelectionError
from .logging import logger
from .types import IncidenceGraph, TearingResult

__all__ = [
    "TraverseDAG",
    "tear_equations",
    "DefaultTearing",
]


class TraverseDAG:
    """
    Holds the DAG of explicitly solved equations while tearing one set of
    equations.

    Parameters:
        g_unknowns: `g_unknowns[eq]` are the unknowns of equation `eq`, i.e.
            the variables the solved form of `eq` depends on.
        nv: Number of variables.
    """

    def __init__(self, g_unknowns: IncidenceGraph, nv: int):
        self.g_unknowns = g_unknowns
        self.nv = nv
        self.assign = [None] * nv  # assign[v] = eq solved for v
        self.dag = nx.DiGraph()
        self.vs = set()

    def init_algebraic_system(
        self,
        vs: Sequence[int],
        e_solved_fixed: Sequence[int],
        v_solved_fixed: Sequence[int],
    ):
        """Reset the DAG for unknowns `vs`, starting from the fixed pairs."""
        if len(e_solved_fixed) != len(v_solved_fixed):
            raise InternalStateSelectionError(
                f"{len(e_solved_fixed)} fixed solved equations, but "
                f"{len(v_solved_fixed)} fixed solved variables."
            )

        self.assign = [None] * self.nv
        self.dag = nx.DiGraph()
        self.vs = set(vs)

        for eq, v in zip(e_solved_fixed, v_solved_fixed):
            self._add(eq, v)

        if not nx.is_directed_acyclic_graph(self.dag):
            raise InternalStateSelectionError(
                "fixed solved equations do not form a DAG.",
                equations=list(e_solved_fixed),
            )

    def _add(self, eq: int, v: int):
        self.assign[v] = eq
        self.dag.add_node(eq)

        # eq needs all other solved unknowns it references
        for w in self.g_unknowns[eq]:
            if w == v or w not in self.vs:
                continue
            e_w = self.assign[w]
            if e_w is not None and e_w != eq:
                self.dag.add_edge(e_w, eq)

        # solved equations referencing v now need eq
        for e_other in list(self.dag.nodes):
            if e_other != eq and v in self.g_unknowns[e_other]:
                self.dag.add_edge(eq, e_other)

    def _remove(self, eq: int, v: int):
        self.assign[v] = None
        self.dag.remove_node(eq)

    def try_assign(self, eq: int, v: int) -> bool:
        """Solve `eq` for `v` if the solved equations remain a DAG."""
        self._add(eq, v)
        if nx.is_directed_acyclic_graph(self.dag):
            return True
        self._remove(eq, v)
        return False

    def sorted_solved(self, es: Sequence[int]) -> tuple[list[int], list[int]]:
        """Solved equations and variables in evaluation order. Ties keep the
        order of `es`."""
        position = {eq: i for i, eq in enumerate(es)}
        e_sorted = list(
            nx.lexicographical_topological_sort(
                self.dag, key=lambda eq: position.get(eq, len(position))
            )
        )
        v_of = {eq: v for v, eq in enumerate(self.assign) if eq is not None}
        return e_sorted, [v_of[eq] for eq in e_sorted]


def tear_equations(
    td: TraverseDAG,
    g_solvable: IncidenceGraph,
    es: Sequence[int],
    vs: Sequence[int],
    *,
    e_solved_fixed: Sequence[int] = (),
    v_solved_fixed: Sequence[int] = (),
    v_tear_fixed: Sequence[int] = (),
) -> TearingResult:
    """
    Tear equations `es` with respect to unknowns `vs`.

    If the returned `v_tear` are given, `v_solved[i]` can be computed from
    `e_solved[i]` in forward sequence; `v_tear` must then be selected so that
    the equations `e_residue` are fulfilled. `es` is the union of `e_solved`
    and `e_residue`, `vs` is the union of `v_solved` and `v_tear`.

    Parameters:
        td: Tearing datastructure.
        g_solvable: `g_solvable[eq]` are the unknowns that can be explicitly
            solved from `eq` without changing the solution space. Only used for
            equations not in `e_solved_fixed`.
        es: Equations to tear.
        vs: Unknowns of `es`.
        e_solved_fixed, v_solved_fixed: A DAG already known for `es`, it is
            used and extended.
        v_tear_fixed: Unknowns that must not be solved for.
    """
    td.init_algebraic_system(vs, e_solved_fixed, v_solved_fixed)

    fixed = set(e_solved_fixed)
    tear_fixed = set(v_tear_fixed)
    e_residue = []
    for eq in es:
        if eq in fixed:
            continue
        solved = False
        for v in g_solvable[eq]:
            if v not in td.vs or v in tear_fixed or td.assign[v] is not None:
                continue
            if td.try_assign(eq, v):
                solved = True
                break
        if not solved:
            e_residue.append(eq)

    e_solved, v_solved = td.sorted_solved(es)
    solved_vars = set(v_solved)
    v_tear = [v for v in vs if v not in solved_vars]

    logger.debug(
        "Torn %d equations: %d solved, %d residues, %d tearing variables.",
        len(es),
        len(e_solved),
        len(e_residue),
        len(v_tear),
    )
    return TearingResult(e_solved, v_solved, e_residue, v_tear)


class DefaultTearing:
    """Greedy DAG tearing, usable wherever a `Tearing` callable is expected."""

    def __init__(self, g_unknowns: IncidenceGraph, nv: int):
        self.td = TraverseDAG(g_unknowns, nv)

    def __call__(
        self,
        g_solvable: IncidenceGraph,
        es: Sequence[int],
        vs: Sequence[int],
        *,
        e_solved_fixed: Sequence[int] = (),
        v_solved_fixed: Sequence[int] = (),
        v_tear_fixed: Sequence[int] = (),
    ) -> TearingResult:
        return tear_equations(
            self.td,
            g_solvable,
            es,
            vs,
            e_solved_fixed=e_solved_fixed,
            v_solved_fixed=v_solved_fixed,
            v_tear_fixed=v_tear_fixed,
        )
