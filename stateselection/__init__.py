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

from .association import revert_association, der_association
from .constraint_sets import get_constraint_sets
from .equation_graph import (
    EquationGraph,
    SortedEquationGraph,
    get_sorted_equation_graph,
)
from .error import (
    StateSelectionError,
    ModelStructureError,
    StabilizationError,
    GraphConsumedError,
    InternalStateSelectionError,
)
from .model_json import StructuralModel, StateSelectionOptions
from .printing import format_sorted_equation_graph, print_sorted_equation_graph
from .tearing import DefaultTearing, TraverseDAG, tear_equations
from .types import ResidualCategory, Tearing, TearingResult

__all__ = [
    "revert_association",
    "der_association",
    "get_constraint_sets",
    "EquationGraph",
    "SortedEquationGraph",
    "get_sorted_equation_graph",
    "StateSelectionError",
    "ModelStructureError",
    "StabilizationError",
    "GraphConsumedError",
    "InternalStateSelectionError",
    "StructuralModel",
    "StateSelectionOptions",
    "format_sorted_equation_graph",
    "print_sorted_equation_graph",
    "DefaultTearing",
    "TraverseDAG",
    "tear_equations",
    "ResidualCategory",
    "Tearing",
    "TearingResult",
]
