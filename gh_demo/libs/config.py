import os
from logging import Logger
from typing import Any

import yaml
from simple_logger.logger import get_logger

from gh_demo.libs.exceptions import config_error
from gh_demo.utils.constants import (
    CONFIG_PATH_ENV_VAR,
    DEFAULT_API_TIMEOUT,
    DEFAULT_CONFIG_PATH,
    DEFAULT_LABEL_COLOR,
    DISCUSSIONS_FILE,
    ISSUES_FILE,
    LABELS_FILE,
    PRESERVE_FILE,
    PROJECT_FILE,
    PULL_REQUESTS_FILE,
    SETTINGS_FILE,
)


def find_project_root(start: str | None = None) -> str:
    """Return the nearest directory at or above ``start`` holding a ``.git`` entry, else ``start``."""
    start = os.path.abspath(start or os.getcwd())
    current = start
    while True:
        if os.path.exists(os.path.join(current, ".git")):
            return current

        parent = os.path.dirname(current)
        if parent == current:
            return start
        current = parent


class Config:
    def __init__(
        self,
        config_root: str | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.logger = logger or get_logger(name="config")
        self.config_root: str = os.path.abspath(
            config_root
            or os.environ.get(CONFIG_PATH_ENV_VAR)
            or os.path.join(find_project_root(), DEFAULT_CONFIG_PATH)
        )
        self.logger.debug(f"Using config root {self.config_root}")

    @property
    def issues_path(self) -> str:
        return os.path.join(self.config_root, ISSUES_FILE)

    @property
    def discussions_path(self) -> str:
        return os.path.join(self.config_root, DISCUSSIONS_FILE)

    @property
    def pull_requests_path(self) -> str:
        return os.path.join(self.config_root, PULL_REQUESTS_FILE)

    @property
    def labels_path(self) -> str:
        return os.path.join(self.config_root, LABELS_FILE)

    @property
    def preserve_path(self) -> str:
        return os.path.join(self.config_root, PRESERVE_FILE)

    @property
    def project_path(self) -> str:
        return os.path.join(self.config_root, PROJECT_FILE)

    @property
    def settings_path(self) -> str:
        return os.path.join(self.config_root, SETTINGS_FILE)

    @property
    def root_data(self) -> dict[str, Any]:
        """Settings from config.yaml; a missing file means no settings."""
        try:
            with open(self.settings_path) as fd:
                data = yaml.safe_load(fd) or {}
        except FileNotFoundError:
            return {}
        except yaml.YAMLError as ex:
            raise config_error("load_settings", f"invalid YAML in {self.settings_path}", ex).with_context(
                "path", self.settings_path
            ) from ex
        except OSError as ex:
            raise config_error("load_settings", f"failed to read {self.settings_path}", ex).with_context(
                "path", self.settings_path
            ) from ex

        if not isinstance(data, dict):
            raise config_error("load_settings", f"{self.settings_path} must contain a mapping").with_context(
                "path", self.settings_path
            )
        return data

    def get_value(self, value: str, return_on_none: Any = None, extra_dict: dict[str, Any] | None = None) -> Any:
        """
        Get value from config

        Supports dot notation for nested values (e.g., "logging.level")

        Order of getting value:
            1. extra_dict, when given
            2. config.yaml in the config root
        """
        if extra_dict:
            result = self._get_nested_value(value, extra_dict)
            if result is not None:
                return result

        result = self._get_nested_value(value, self.root_data)
        if result is not None:
            return result

        return return_on_none

    @property
    def api_timeout(self) -> float:
        value = self.get_value(value="api-timeout", return_on_none=DEFAULT_API_TIMEOUT)
        try:
            timeout = float(value)
        except (TypeError, ValueError) as ex:
            raise config_error("load_settings", f"api-timeout must be a number, got {value!r}", ex) from ex

        if timeout <= 0:
            raise config_error("load_settings", f"api-timeout must be positive, got {value!r}")
        return timeout

    @property
    def default_label_color(self) -> str:
        return str(self.get_value(value="default-label-color", return_on_none=DEFAULT_LABEL_COLOR)).lstrip("#")

    @staticmethod
    def _get_nested_value(key: str, data: dict[str, Any]) -> Any:
        current: Any = data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current
