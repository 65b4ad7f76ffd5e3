"""Operator configuration: built-in defaults, an optional YAML file, then environment."""
import copy
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..utils.time import duration_seconds

DEFAULT_CONFIG: Dict[str, Any] = {
    "namespace": None,
    "workers": 1,
    "requeueInterval": "30s",
    "backoff": {
        "base": "1s",
        "max": "5m",
    },
    "watchTimeout": "5m",
}

# Path of the YAML config file, read when no path is given explicitly.
CONFIG_PATH_ENV = "APP_CONTROLLER_CONFIG"

# Environment variable -> top level config key.
ENV_OVERRIDES = {
    "APP_CONTROLLER_NAMESPACE": "namespace",
    "APP_CONTROLLER_WORKERS": "workers",
    "APP_CONTROLLER_REQUEUE_INTERVAL": "requeueInterval",
}


class Configuration:
    def __init__(self, config_data: Dict[str, Any], path: Optional[Path] = None):
        self._config = config_data
        self.path = path
        self._config.setdefault("backoff", {})

    @property
    def namespace(self) -> Optional[str]:
        return self._config.get("namespace") or None

    @property
    def workers(self) -> int:
        workers = int(self._config.get("workers", 1))
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        return workers

    @property
    def requeue_interval(self) -> float:
        return duration_seconds(self._config.get("requeueInterval", "30s"))

    @property
    def backoff_base(self) -> float:
        return duration_seconds(self._config["backoff"].get("base", "1s"))

    @property
    def backoff_max(self) -> float:
        return duration_seconds(self._config["backoff"].get("max", "5m"))

    @property
    def watch_timeout(self) -> int:
        return int(duration_seconds(self._config.get("watchTimeout", "5m")))

    def retry_delay(self, retry: int) -> float:
        """Delay before retry number ``retry`` of a failed pass: doubles from the base, up to the max."""
        return min(self.backoff_base * 2 ** retry, self.backoff_max)

    def override(self, **values: Any) -> "Configuration":
        """Copy of this configuration with the non-None ``values`` applied."""
        data = copy.deepcopy(self._config)
        data.update({key: value for key, value in values.items() if value is not None})
        return Configuration(data, path=self.path)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)


def deep_merge(source, destination):
    for key, value in source.items():
        if isinstance(value, dict):
            node = destination.setdefault(key, {})
            deep_merge(value, node)
        else:
            destination[key] = value
    return destination


def load_config(
    config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Configuration:
    environ = os.environ if environ is None else environ
    if config_path is None and environ.get(CONFIG_PATH_ENV):
        config_path = Path(environ[CONFIG_PATH_ENV])

    config_data = copy.deepcopy(DEFAULT_CONFIG)
    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f)
        if user_config:
            config_data = deep_merge(user_config, config_data)

    for variable, key in ENV_OVERRIDES.items():
        if environ.get(variable):
            config_data[key] = environ[variable]
    return Configuration(config_data, path=config_path)
