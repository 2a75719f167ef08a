from __future__ import annotations

import json

import pytest

from bayesbandit.core.config import (
    ArmStats,
    EmptyCount,
    FromStats,
    load_config,
    load_config_file,
    resolve_config,
)
from bayesbandit.errors import InvalidConfiguration


def test_explicit_arms_take_precedence_over_count():
    config = resolve_config(arms=[{"trials": 5, "successes": 2}], number_of_arms=4)
    assert config == FromStats(arms=(ArmStats(trials=5, successes=2),))


def test_count_only():
    assert resolve_config(number_of_arms=3) == EmptyCount(n=3)
    assert resolve_config(number_of_arms=0) == EmptyCount(n=0)


def test_neither_arms_nor_count_is_rejected():
    with pytest.raises(InvalidConfiguration):
        resolve_config()


@pytest.mark.parametrize("count", [-1, 2.5, True, "3"])
def test_invalid_counts(count):
    with pytest.raises(InvalidConfiguration):
        EmptyCount(n=count)


@pytest.mark.parametrize(
    "stats",
    [
        {"trials": 3, "successes": 4},
        {"trials": -1, "successes": 0},
        {"trials": 3, "successes": -0.5},
        {"trials": 3, "successes": "1"},
        {"trials": 3, "successes": 1, "clicks": 2},
        (1, 2, 3),
        "5,2",
    ],
)
def test_invalid_arm_stats(stats):
    with pytest.raises(InvalidConfiguration):
        FromStats(arms=[stats])


def test_arm_stats_from_pairs_and_mappings():
    config = FromStats(arms=[(5, 2), {"trials": 4}, ArmStats(10, 2.5)])
    assert config.arms == (ArmStats(5, 2), ArmStats(4, 0.0), ArmStats(10, 2.5))


def test_load_config_rejects_unknown_keys():
    with pytest.raises(InvalidConfiguration):
        load_config({"numberOfArms": 3})


def test_load_config_file(tmp_path):
    path = tmp_path / "bandit.json"
    path.write_text(json.dumps({"arms": [{"trials": 10, "successes": 7}, {"trials": 8, "successes": 1}]}), encoding="utf-8")

    config = load_config_file(path)
    assert config == FromStats(arms=(ArmStats(10, 7), ArmStats(8, 1)))


def test_load_config_file_errors(tmp_path):
    with pytest.raises(InvalidConfiguration):
        load_config_file(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{arms:", encoding="utf-8")
    with pytest.raises(InvalidConfiguration):
        load_config_file(broken)
