import os

import pytest
import yaml

from gh_demo.libs.config import Config, find_project_root
from gh_demo.libs.exceptions import ErrorLayer, LayeredError
from gh_demo.utils.constants import CONFIG_PATH_ENV_VAR, DEFAULT_API_TIMEOUT, DEFAULT_LABEL_COLOR


@pytest.fixture
def config_root(tmp_path):
    return str(tmp_path)


def _write_settings(config_root: str, data: object) -> None:
    with open(os.path.join(config_root, "config.yaml"), "w") as fd:
        yaml.dump(data, fd)


def test_explicit_root_wins(config_root, monkeypatch, mock_logger):
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, "/from/env")
    config = Config(config_root=config_root, logger=mock_logger)
    assert config.config_root == config_root
    assert config.issues_path == os.path.join(config_root, "issues.json")
    assert config.pull_requests_path == os.path.join(config_root, "prs.json")
    assert config.preserve_path == os.path.join(config_root, "preserve.json")
    assert config.project_path == os.path.join(config_root, "project.json")


def test_env_root(config_root, monkeypatch, mock_logger):
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, config_root)
    assert Config(logger=mock_logger).config_root == config_root


def test_default_root_under_project(tmp_path, monkeypatch, mock_logger):
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)
    monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)
    monkeypatch.chdir(nested)

    root = str(tmp_path.resolve())
    assert find_project_root() == root
    assert Config(logger=mock_logger).config_root == os.path.join(root, ".github", "demos")


def test_missing_settings_uses_defaults(config_root, mock_logger):
    config = Config(config_root=config_root, logger=mock_logger)
    assert config.root_data == {}
    assert config.api_timeout == DEFAULT_API_TIMEOUT
    assert config.default_label_color == DEFAULT_LABEL_COLOR
    assert config.get_value("log-level", return_on_none="INFO") == "INFO"


def test_get_value_nested_and_extra_dict(config_root, mock_logger):
    _write_settings(config_root, {"api-timeout": 12, "logging": {"level": "DEBUG"}, "default-label-color": "#abcdef"})
    config = Config(config_root=config_root, logger=mock_logger)

    assert config.api_timeout == 12.0
    assert config.default_label_color == "abcdef"
    assert config.get_value("logging.level") == "DEBUG"
    assert config.get_value("logging.missing", return_on_none="x") == "x"
    assert config.get_value("api-timeout", extra_dict={"api-timeout": 3}) == 3


@pytest.mark.parametrize("value", [0, -1, "soon"])
def test_invalid_api_timeout(config_root, mock_logger, value):
    _write_settings(config_root, {"api-timeout": value})
    with pytest.raises(LayeredError) as exc_info:
        _ = Config(config_root=config_root, logger=mock_logger).api_timeout

    assert exc_info.value.layer == ErrorLayer.CONFIG


def test_invalid_yaml(config_root, mock_logger):
    with open(os.path.join(config_root, "config.yaml"), "w") as fd:
        fd.write("key: [unclosed\n")

    with pytest.raises(LayeredError) as exc_info:
        _ = Config(config_root=config_root, logger=mock_logger).root_data

    assert exc_info.value.layer == ErrorLayer.CONFIG
    assert exc_info.value.operation == "load_settings"


def test_settings_must_be_mapping(config_root, mock_logger):
    _write_settings(config_root, ["a", "b"])
    with pytest.raises(LayeredError):
        _ = Config(config_root=config_root, logger=mock_logger).root_data
