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

import logging as std_logging

import pytest

import stateselection.logging as logging
from stateselection.model_json import StateSelectionOptions

pytestmark = pytest.mark.minimal


def test_logdata():
    assert logging.logdata() == {}
    assert logging.logdata(block=1, level=0) == {
        "extra": {"extras": {"block": 1, "level": 0}}
    }
    assert logging.logdata(equations=[4, 5]) == {
        "extra": {"extras": {"equations": "eq.4, eq.5"}}
    }


def test_set_log_level_by_name():
    logging.set_log_level("debug")
    assert logging.logger.level == logging.DEBUG
    logging.set_log_level(logging.WARNING)
    assert logging.logger.level == logging.WARNING


def test_color_formatter():
    record = std_logging.LogRecord(
        "stateselection", logging.INFO, __file__, 1, "sorted %d", (3,), None
    )
    record.extras = {"nc": 2}
    text = logging.ColorFormatter().format(record)
    assert "sorted 3" in text
    assert "nc" in text and "=2" in text


def test_sort_logs_summary(scalar_ode, caplog):
    with caplog.at_level(std_logging.DEBUG, logger="stateselection"):
        scalar_ode.sort(StateSelectionOptions(log_level="DEBUG"))

    messages = [r.getMessage() for r in caplog.records]
    assert any("Entering EquationGraph.sort" in m for m in messages)
    assert any(m.startswith("Sorted 1 equations") for m in messages)
