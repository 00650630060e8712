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

from stateselection import models
from stateselection.printing import (
    format_equation,
    format_sorted_equation_graph,
    print_sorted_equation_graph,
)

pytestmark = pytest.mark.minimal


def test_format_equation():
    bder = np.array([[0, 0], [0, 1], [0, 2]])
    assert format_equation(0, bder) == "eq.0"
    assert format_equation(1, bder) == "eq.1 = der(eq.0)"
    assert format_equation(2, bder) == "eq.2 = der2(eq.0)"


def test_pendulum(pendulum):
    text = format_sorted_equation_graph(pendulum.sort())
    lines = [line.strip() for line in text.splitlines()]

    assert "Variables of _x vector (length=6):" in lines
    assert "_x[0]: x" in lines
    assert "_x[2]: der(x)      # = der(_x[0])" in lines
    assert "_x[4]: ---      # integral of lambda variable" in lines
    assert "_x[5]: ---      # integral of mue variable" in lines

    assert "_der_x[0]: ---      # = _x[2] = der(x)" in lines
    assert "_der_x[2]: der(der(x))" in lines
    assert "_der_x[4]: lam     # lambda variable" in lines
    assert (
        "_der_x[5]: ---      # mue variable associated with equation "
        "eq.5 = der(eq.4)" in lines
    )

    assert "Sorted equations (length(_r) = 6, nc = 2):" in lines
    assert "_r[0]   = _der_x[0] - _x[2]" in lines
    assert "_r[1]   = _der_x[1] - _x[3]" in lines
    assert "_r[4]   = < residue of eq.4 >" in lines
    assert "vx   = < solved from eq.0 >" in lines
    assert "_r[5]   = < residue of eq.5 = der(eq.4) >" in lines
    assert "der(vx)   = < solved from eq.7 = der(eq.0) >" in lines
    assert "_r[2]   = < residue of eq.2 >" in lines


def test_algebraic_variables():
    text = format_sorted_equation_graph(models.algebraic_system().sort())
    lines = [line.strip() for line in text.splitlines()]
    assert "_x[0]: y2      # algebraic variable" in lines
    assert "_der_x[0]: ---      # derivative of algebraic variable" in lines
    assert "y1   = < solved from eq.0 >" in lines
    assert "_r[0]   = < residue of eq.1 >" in lines


def test_without_equations(scalar_ode):
    text = format_sorted_equation_graph(scalar_ode.sort(), equations=False)
    assert "_x[0]: x" in text
    assert "_der_x[0]: der(x)" in text
    assert "Sorted equations" not in text


def test_print(scalar_ode, capsys):
    print_sorted_equation_graph(scalar_ode.sort())
    out = capsys.readouterr().out
    assert "_r[0]   = < residue of eq.0 >" in out
