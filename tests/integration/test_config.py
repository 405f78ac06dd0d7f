from __future__ import annotations

import pytest

from reservoir.errors import ConfigError
from reservoir.integration.config import EngineConfig, config_from_env, load_config


def test_defaults() -> None:
    cfg = EngineConfig()
    assert cfg.default_fee_bps == 30
    assert cfg.max_exp_input == 25_000.0
    assert cfg.max_question_len == 256
    assert cfg.log_level == "WARNING"


def test_load_yaml(tmp_path) -> None:
    path = tmp_path / "reservoir.yaml"
    path.write_text("default_fee_bps: 5\nmax_exp_input: 100\nlog_level: debug\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.default_fee_bps == 5
    assert cfg.max_exp_input == 100.0
    assert cfg.log_level == "DEBUG"
    assert cfg.max_question_len == 256


def test_empty_yaml_gives_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == EngineConfig()


def test_unknown_keys_and_bad_documents(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("default_fee: 5\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="unknown config keys"):
        load_config(path)

    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)

    path.write_text("default_fee_bps: 20000\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="default_fee_bps"):
        load_config(path)


def test_env_overrides_file(tmp_path) -> None:
    path = tmp_path / "reservoir.yaml"
    path.write_text("default_fee_bps: 5\n", encoding="utf-8")
    env = {"RESERVOIR_DEFAULT_FEE_BPS": "7", "RESERVOIR_LOG_LEVEL": "info", "UNRELATED": "x"}
    cfg = config_from_env(load_config(path), environ=env)
    assert cfg.default_fee_bps == 7
    assert cfg.log_level == "INFO"


def test_env_parse_error() -> None:
    with pytest.raises(ConfigError, match="cannot parse"):
        config_from_env(environ={"RESERVOIR_MAX_QUESTION_LEN": "lots"})


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf"])
def test_max_exp_input_must_be_finite(raw) -> None:
    with pytest.raises(ConfigError, match="max_exp_input"):
        config_from_env(environ={"RESERVOIR_MAX_EXP_INPUT": raw})


def test_non_finite_max_exp_input_in_yaml(tmp_path) -> None:
    path = tmp_path / "reservoir.yaml"
    path.write_text("max_exp_input: .nan\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="finite"):
        load_config(path)
