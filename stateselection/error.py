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

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .equation_graph import SortedEquationGraph


__all__ = [
    "StateSelectionError",
    "ModelStructureError",
    "StabilizationError",
    "GraphConsumedError",
    "InternalStateSelectionError",
]


class StateSelectionError(Exception):
    """Base class for all errors raised while selecting states.

    All of these errors are fatal: the model cannot be index-reduced as given
    and no partial result is usable.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        equations: Optional[Sequence[int]] = None,
        variables: Optional[Sequence[str]] = None,
    ):
        """Create a new StateSelectionError.

        Only `message` is a positional argument, all others are keyword arguments.

        Args:
            message: A custom error message, defaults to the error class name.
            equations: Indices of the equations related to the error.
            variables: Names (or indices) of the variables related to the error.
        """
        super().__init__(message)
        self.message = message
        self.equations = list(equations) if equations is not None else None
        self.variables = list(variables) if variables is not None else None

    def __str__(self):
        message = self.message or self.default_message
        return f"{message}{self._context_info()}"

    def _context_info(self) -> str:
        strbuf = []
        if self.equations:
            eqs = ", ".join(f"eq.{eq}" for eq in self.equations)
            strbuf.append(f"\nRelated equations:\n\t{eqs}")
        if self.variables:
            variables = ", ".join(str(v) for v in self.variables)
            strbuf.append(f"\nRelated variables:\n\t{variables}")
        if self.__cause__ is not None:
            strbuf.append(f": {self.__cause__}")
        return "".join(strbuf)

    @property
    def default_message(self):
        return type(self).__name__


class ModelStructureError(StateSelectionError):
    """The structural description of the DAE is malformed: mismatched vector
    lengths, indices out of bounds or block equations without an assigned
    variable."""

    pass


class StabilizationError(StateSelectionError):
    """The DAE requires stabilizing multiplier (mue) variables but stabilization
    has been disabled."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        graph: Optional["SortedEquationGraph"] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.graph = graph


class GraphConsumedError(StateSelectionError):
    """An EquationGraph has been sorted more than once. An EquationGraph must be
    instantiated once for every sort."""

    pass


class InternalStateSelectionError(StateSelectionError):
    """Internal consistency check failed. This points to a defect in the state
    selection itself (or in the Pantelides/BLT stage that produced its inputs)
    rather than to a malformed model."""

    def __str__(self):
        message = self.message or self.default_message
        return f"Internal error in state selection: {message}{self._context_info()}"
