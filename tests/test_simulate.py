from __future__ import annotations

import json

import pytest

from bayesbandit import simulate
from bayesbandit.errors import InvalidConfiguration
from bayesbandit.simulate import SimulationSettings, load_settings, run_simulation


def test_default_settings_file_loads():
    settings = load_settings()
    assert len(settings.rates) >= 2
    assert 0 < settings.alpha <= 1


def test_simulation_retires_weak_arm():
    settings = SimulationSettings(rates=[0.05, 0.5], rounds=3000, alpha=0.01, check_every=200, seed=11)
    result = run_simulation(settings)

    assert 0 in result.dropped
    assert 1 not in result.dropped
    assert result.summary.loc[1, "trials"] > result.summary.loc[0, "trials"]
    assert result.summary["true_rate"].tolist() == [0.05, 0.5]
    assert result.regret >= 0.0


def test_simulation_is_reproducible():
    settings = SimulationSettings(rates=[0.1, 0.2, 0.3], rounds=500, check_every=100, seed=3)
    first = run_simulation(settings)
    second = run_simulation(settings)
    assert first.summary["trials"].tolist() == second.summary["trials"].tolist()
    assert first.dropped == second.dropped


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rates": []},
        {"rates": [0.1, 1.2]},
        {"rates": [0.1], "rounds": -1},
        {"rates": [0.1], "check_every": 0},
        {"rates": [0.1], "alpha": 0},
    ],
)
def test_invalid_settings(kwargs):
    with pytest.raises(InvalidConfiguration):
        SimulationSettings(**kwargs)


def test_unknown_setting_keys(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"rates": [0.1, 0.2], "arms": 3}), encoding="utf-8")
    with pytest.raises(InvalidConfiguration):
        load_settings(path)


def test_cli_overrides_config(tmp_path, capsys):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"rates": [0.1, 0.2], "rounds": 10}), encoding="utf-8")

    code = simulate.main(["--config", str(path), "--rates", "0.2", "0.6", "--rounds", "300", "--seed", "4", "--log-level", "WARNING"])

    assert code == 0
    out = capsys.readouterr().out
    assert "success_rate" in out
    assert "true_rate" in out


def test_cli_reports_bad_config(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"rates": [2.0]}), encoding="utf-8")
    assert simulate.main(["--config", str(path), "--log-level", "ERROR"]) == 1
