"""Shared fixtures: a four-node diamond topology and its profile log."""

from __future__ import annotations

import json

import pytest

from flowlog_profiler.log import parse_log_text
from flowlog_profiler.ops.parser import parse_ops_data

DIAMOND_LOG = """\
addr        activations  total_active_ms  name
[0, 1]      10           5.5              Input
[0, 2]      3            2.25             Map
[0, 3]      4            1.0              Filter
[0, 4]      7            10.0             Join: left
[0, 9]      1            0.5              Unmapped probe
"""


def diamond_ops_dict() -> dict:
    """1 -> {2, 3}, 2 -> 4, 3 -> 4; node 4 also maps an addr absent from the log."""
    return {
        "input": [
            {"id": 1, "label": "Input", "children": [2, 3], "operators": [{"addr": [0, 1]}]},
        ],
        "strata": [
            {
                "label": "stratum 0",
                "rules": [
                    {
                        "rule": "r(x) :- a(x), b(x).",
                        "stages": [
                            {
                                "id": 2,
                                "label": "Map",
                                "children": [4],
                                "operators": [{"addr": [0, 2]}],
                                "fingerprint": "fp-map",
                            },
                            {
                                "id": 3,
                                "label": "Filter",
                                "children": [4],
                                "operators": [{"addr": [0, 3]}],
                            },
                        ],
                    }
                ],
                "leave": [
                    {
                        "id": 4,
                        "label": "Join",
                        "operators": [{"addr": [0, 4]}, {"addr": [0, 5]}],
                        "tags": ["join"],
                        "block": "b1",
                    }
                ],
            }
        ],
    }


@pytest.fixture
def diamond_ops():
    return parse_ops_data(diamond_ops_dict())


@pytest.fixture
def diamond_log():
    return parse_log_text(DIAMOND_LOG, "diamond.log")


@pytest.fixture
def diamond_files(tmp_path):
    """Write the diamond ops spec and log to disk; returns (ops_path, log_path)."""
    ops_path = tmp_path / "ops.json"
    ops_path.write_text(json.dumps(diamond_ops_dict()), encoding="utf-8")
    log_path = tmp_path / "profile.log"
    log_path.write_text(DIAMOND_LOG, encoding="utf-8")
    return ops_path, log_path
