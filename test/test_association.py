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
import pytest

from stateselection.association import (
    deduce_higher,
    der_association,
    is_algebraic,
    revert_association,
)
from stateselection.error import InternalStateSelectionError, ModelStructureError

pytestmark = pytest.mark.minimal


class TestRevertAssociation:
    def test_revert(self):
        A = [5, 6, 7, 8, None, 9, 10, None, None, None, None]
        a_rev = revert_association(A, len(A))
        assert a_rev == [None, None, None, None, None, 0, 1, 2, 3, 5, 6]

    def test_inverse(self):
        forward = [None, 3, 0, None, 1]
        reverse = revert_association(forward, 5)
        for i, j in enumerate(forward):
            if j is not None:
                assert reverse[j] == i
        for j, i in enumerate(reverse):
            if i is not None:
                assert forward[i] == j

    def test_different_size(self):
        # equation -> variable association has length ne, reverted length nv
        assert revert_association([2, 0], 4) == [1, None, 0, None]

    def test_all_none(self):
        assert revert_association([None, None], 3) == [None, None, None]

    def test_out_of_bounds(self):
        with pytest.raises(ModelStructureError, match="out of bounds"):
            revert_association([0, 3], 3)

    def test_not_injective(self):
        # two variables assigned to the same equation
        with pytest.raises(ModelStructureError, match="both point to 1"):
            revert_association([1, None, 1], 3)

    def test_negative(self):
        with pytest.raises(ModelStructureError):
            revert_association([-1], 3)


class TestDeduceHigher:
    def test_deduce_higher(self):
        B = [7, 8, None, None, 5, 6, None, None, None]
        assert deduce_higher([4, 0, 1], B) == [5, 7, 8]
        assert deduce_higher([], B) == []

    def test_missing_derivative(self):
        with pytest.raises(InternalStateSelectionError):
            deduce_higher([2], [None, None, None])


def test_der_association():
    B = [7, 8, None, None, 5, 6, None, None, None]
    ader = der_association(B, 5)
    assert ader.shape == (9, 2)
    np.testing.assert_array_equal(ader[:5, 0], np.arange(5))
    np.testing.assert_array_equal(ader[:5, 1], np.zeros(5))
    assert tuple(ader[5]) == (4, 1)
    assert tuple(ader[6]) == (4, 2)
    assert tuple(ader[7]) == (0, 1)
    assert tuple(ader[8]) == (1, 1)


def test_is_algebraic():
    A = [1, None, None]
    a_rev = revert_association(A, 3)
    assert not is_algebraic(0, A, a_rev)
    assert not is_algebraic(1, A, a_rev)
    assert is_algebraic(2, A, a_rev)
