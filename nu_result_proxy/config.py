"""
Load proxy settings from the environment (and a local .env file).
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv

from nu_result_proxy.urls import BASE_URL

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

DEFAULTS = {
    "port": 3000,
    "host": "0.0.0.0",
    "results_base_url": BASE_URL,
    "navigation_timeout_ms": 30000,
    "submit_timeout": 30,
    "user_agent": DEFAULT_USER_AGENT,
    "headless": True,
    "log_level": "INFO",
}

ENV_MAPPINGS = {
    "PORT": "port",
    "HOST": "host",
    "RESULTS_BASE_URL": "results_base_url",
    "NAVIGATION_TIMEOUT_MS": "navigation_timeout_ms",
    "SUBMIT_TIMEOUT": "submit_timeout",
    "USER_AGENT": "user_agent",
    "HEADLESS": "headless",
    "LOG_LEVEL": "log_level",
}


def _convert_env_value(value: str):
    """Convert environment variable string to appropriate Python type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


class Settings:
    """Proxy settings: defaults overridden by environment variables."""

    def __init__(self, overrides: Dict[str, Any] = None, environ=None):
        self._values = dict(DEFAULTS)
        self._values.update(self._from_env(os.environ if environ is None else environ))
        if overrides:
            self._values.update(overrides)

    @staticmethod
    def _from_env(environ) -> Dict[str, Any]:
        values = {}
        for env_var, key in ENV_MAPPINGS.items():
            env_value = environ.get(env_var)
            if env_value is not None and env_value != "":
                values[key] = _convert_env_value(env_value)
        return values

    @property
    def port(self) -> int:
        return int(self._values["port"])

    @property
    def host(self) -> str:
        return str(self._values["host"])

    @property
    def results_base_url(self) -> str:
        return str(self._values["results_base_url"])

    @property
    def navigation_timeout_ms(self) -> int:
        return int(self._values["navigation_timeout_ms"])

    @property
    def submit_timeout(self) -> float:
        return float(self._values["submit_timeout"])

    @property
    def user_agent(self) -> str:
        return str(self._values["user_agent"])

    @property
    def headless(self) -> bool:
        return bool(self._values["headless"])

    @property
    def log_level(self) -> str:
        return str(self._values["log_level"]).upper()


def load_settings(**overrides) -> Settings:
    """Read .env into the environment, then build Settings."""
    load_dotenv()
    return Settings(overrides=overrides)
