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

import numpy as np

from .error import InternalStateSelectionError, ModelStructureError
from .types import Association

__all__ = [
    "revert_association",
    "deduce_higher",
    "der_association",
    "is_algebraic",
]


def revert_association(forward: Association, size: int) -> list:
    """
    Reverts the association `forward[i] = j`, such that `reverse[j] = i`.
    `forward[i] = None` is allowed and ignored. `forward` must be injective.

    Parameters:
        forward: The association to revert.
        size: Length of the reverted association, must be larger than every
            `j` appearing in `forward`.

    Returns:
        The reverted association as a list of length `size`, with None where
        no element of `forward` points to.
    """
    reverse = [None] * size
    for i, j in enumerate(forward):
        if j is None:
            continue
        if not 0 <= j < size:
            raise ModelStructureError(
                f"Association entry {i} -> {j} is out of bounds (size {size})."
            )
        if reverse[j] is not None:
            raise ModelStructureError(
                f"Association entries {reverse[j]} and {i} both point to {j}."
            )
        reverse[j] = i
    return reverse


def deduce_higher(lower, forward: Association) -> list:
    """Differentiate every element of `lower` once using the association
    `forward` (A for variables, B for equations)."""
    higher = []
    for element in lower:
        der = forward[element]
        if der is None:
            raise InternalStateSelectionError(
                f"element {element} has no derivative, but its derivative is "
                "required to propagate the tearing of the lower level."
            )
        higher.append(der)
    return higher


def der_association(forward: Association, n_base: int) -> np.ndarray:
    """
    Determine base element and differentiation order of every element.

    Starting from each of the first `n_base` (base) elements, the derivative
    chain `forward[i], forward[forward[i]], ...` is followed.

    Returns:
        Integer array `ader` of shape (len(forward), 2), where `ader[i, 0]` is
        the base element of `i` and `ader[i, 1]` is the number of times the
        base has been differentiated to get `i`. Elements that are not
        reached from a base are their own base with order 0.
    """
    n = len(forward)
    ader = np.column_stack([np.arange(n), np.zeros(n, dtype=int)])
    for i in range(n_base):
        der = forward[i]
        order = 1
        while der is not None:
            ader[der, 0] = i
            ader[der, 1] = order
            order += 1
            der = forward[der]
    return ader


def is_algebraic(v: int, A: Association, a_rev: Association) -> bool:
    """A variable is algebraic if it has no derivative and is no derivative."""
    return A[v] is None and a_rev[v] is None
