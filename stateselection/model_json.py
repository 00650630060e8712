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
This module contains types that map directly to the JSON format of a structural
DAE description, as produced by a Pantelides + BLT stage.
"""

import dataclasses
from typing import Optional

from dataclasses_json import dataclass_json

from . import logging
from .equation_graph import SortedEquationGraph, get_sorted_equation_graph
from .error import ModelStructureError
from .printing import print_sorted_equation_graph
from .types import Tearing

__all__ = [
    "StructuralModel",
    "StateSelectionOptions",
]


# Container for options of the state selection.
@dataclasses.dataclass
class StateSelectionOptions:
    """Options for `StructuralModel.sort`."""

    # If False, DAEs that require stabilizing mue variables are rejected with a
    # StabilizationError, for code generators that cannot handle them.
    with_stabilization: bool = True

    # Log level of the package logger, e.g. "DEBUG". None leaves it unchanged.
    log_level: Optional[str] = None

    # Print the sorted equation graph after a successful sort.
    print_graph: bool = False


@dataclass_json
@dataclasses.dataclass
class StructuralModel:
    """Structural description of an ODAE after Pantelides and BLT sorting.

    All indices are 0-based, null/None means "no relation".
    """

    g_origin: list[list[int]]
    blt: list[list[int]]
    assign: list[Optional[int]]
    A: list[Optional[int]]
    B: list[Optional[int]]
    var_names: list[str]
    # Only needed for non-differentiated equations
    g_solvable: Optional[list[list[int]]] = None

    @property
    def num_equations(self) -> int:
        return len(self.g_origin)

    @property
    def num_variables(self) -> int:
        return len(self.var_names)

    def validate(self):
        ne = self.num_equations
        nv = self.num_variables
        for name, vec, size in (("assign", self.assign, nv), ("A", self.A, nv)):
            if len(vec) != size:
                raise ModelStructureError(
                    f"{name} has length {len(vec)}, but there are {nv} variables."
                )
        if len(self.B) != ne:
            raise ModelStructureError(
                f"B has length {len(self.B)}, but there are {ne} equations."
            )
        if self.g_solvable is not None:
            if len(self.g_solvable) != ne:
                raise ModelStructureError(
                    f"g_solvable has length {len(self.g_solvable)}, but there are "
                    f"{ne} equations."
                )
            for eq, (solvable, origin) in enumerate(zip(self.g_solvable, self.g_origin)):
                if not set(solvable) <= set(origin):
                    raise ModelStructureError(
                        "Solvable variables must be a subset of the variables of "
                        "the equation.",
                        equations=[eq],
                    )

        in_blt = [eq for block in self.blt for eq in block]
        if len(in_blt) != len(set(in_blt)):
            raise ModelStructureError("An equation appears in more than one BLT block.")

    def sort(
        self,
        options: Optional[StateSelectionOptions] = None,
        tearing: Optional[Tearing] = None,
    ) -> SortedEquationGraph:
        if options is None:
            options = StateSelectionOptions()
        if options.log_level is not None:
            logging.set_log_level(options.log_level)

        self.validate()
        g_solvable = self.g_solvable
        if g_solvable is None:
            g_solvable = [[] for _ in range(self.num_equations)]

        graph = get_sorted_equation_graph(
            self.g_origin,
            g_solvable,
            self.blt,
            self.assign,
            self.A,
            self.B,
            self.var_names,
            with_stabilization=options.with_stabilization,
            tearing=tearing,
        )
        if options.print_graph:
            print_sorted_equation_graph(graph)
        return graph
