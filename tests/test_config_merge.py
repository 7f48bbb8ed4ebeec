import pytest

from xwing_sim.config import (
    SimulationSettings,
    _deep_merge,
    apply_cli_overrides,
    env_overrides,
    load_configs,
    load_settings,
)

def test_deep_merge_simple():
    a = {"simulation": {"trials": 100, "seed": 1}, "api": {"port": 8000}}
    b = {"simulation": {"seed": 3}, "api": {"host": "0.0.0.0"}}
    c = _deep_merge(a, b)
    assert c["simulation"]["trials"] == 100 and c["simulation"]["seed"] == 3
    assert c["api"]["port"] == 8000 and c["api"]["host"] == "0.0.0.0"

def test_env_overrides_parsing(monkeypatch):
    monkeypatch.setenv("XWING_SIM__SIMULATION__TRIALS", "512")
    monkeypatch.setenv("XWING_SIM__SIMULATION__USE_PROCESSES", "true")
    monkeypatch.setenv("XWING_SIM__SIMULATION__SEED", "none")
    d = env_overrides()
    assert d["simulation"]["trials"] == 512
    assert d["simulation"]["use_processes"] is True
    assert d["simulation"]["seed"] is None

def test_cli_none_values_do_not_clobber():
    base = {"simulation": {"trials": 50, "roster": "duel"}}
    merged = apply_cli_overrides(base, {"simulation": {"trials": None, "roster": "default"}})
    assert merged["simulation"] == {"trials": 50, "roster": "default"}

def test_load_configs_merges_files_in_order(tmp_path):
    first = tmp_path / "base.yaml"
    first.write_text("simulation:\n  trials: 10\n  action: evade\n", encoding="utf-8")
    second = tmp_path / "override.json"
    second.write_text('{"simulation": {"trials": 20}}', encoding="utf-8")
    cfg = load_configs([str(first), str(second)])
    assert cfg == {"simulation": {"trials": 20, "action": "evade"}}

def test_load_configs_rejects_non_mapping(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_configs([str(bad)])

def test_settings_layering(tmp_path, monkeypatch):
    path = tmp_path / "sim.yaml"
    path.write_text("simulation:\n  trials: 10\n  workers: 2\n  roster: duel\n", encoding="utf-8")
    monkeypatch.setenv("XWING_SIM__SIMULATION__WORKERS", "3")
    settings = load_settings([str(path)], {"trials": 40, "seed": None})
    assert settings.trials == 40
    assert settings.workers == 3
    assert settings.roster == "duel"
    assert settings.seed is None
    assert settings.action == "focus"

def test_settings_defaults_and_validation():
    settings = SimulationSettings.from_config({})
    assert settings.trials == 1000
    assert settings.round_cap == 1000
    assert SimulationSettings(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValueError):
        SimulationSettings.from_config({"simulation": {"trials": "many"}})
    with pytest.raises(ValueError):
        SimulationSettings(workers=0)
    with pytest.raises(ValueError):
        SimulationSettings(log_level="LOUD")
