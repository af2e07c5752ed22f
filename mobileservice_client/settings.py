"""
Mobile service client settings provider
"""

import os
from typing import Any, Dict, List, Optional, Tuple

try:
    import ujson as json
except ImportError:
    import json

import pydantic
from pydantic.env_settings import SettingsSourceCallable as _SettingsSourceCallable

from .schemas import config


CONFIG_PATHS: List[str] = ["mobileservice.json", os.path.join(os.path.expanduser("~"), ".mobileservice.json")]
"""
list of search paths for the config file, can be overwritten by the env variable ``CONFIG_PATH``
"""

if os.environ.get("CONFIG_PATH"):
    CONFIG_PATHS = [os.environ.get("CONFIG_PATH")]


class Settings(pydantic.BaseSettings, config.ClientConfig):
    """
    Mobile service client settings

    Values are taken from the environment first (prefixed with ``MOBILESERVICE_``
    and using ``__`` as delimiter for nested values, e.g. ``MOBILESERVICE_TRANSPORT__TIMEOUT``),
    then from the first existing JSON config file in ``CONFIG_PATHS``, then
    from the explicit keyword arguments and finally from the built-in defaults.
    """

    class Config:
        env_prefix = "MOBILESERVICE_"
        env_nested_delimiter = "__"

        @classmethod
        def customise_sources(
                cls,
                init_settings: _SettingsSourceCallable,
                env_settings: _SettingsSourceCallable,
                file_secret_settings: _SettingsSourceCallable
        ) -> Tuple[_SettingsSourceCallable, ...]:
            return env_settings, file_secret_settings, read_settings_from_file, init_settings, get_default_config


def read_settings_from_file(_: Optional[pydantic.BaseSettings]) -> Dict[str, Any]:
    for path in CONFIG_PATHS:
        if os.path.exists(path):
            with open(path, "r", encoding="UTF-8") as file:
                return json.load(file)
    return {}


def store_configuration(conf: Optional[config.ClientConfig] = None, path: Optional[str] = None) -> config.ClientConfig:
    p = path or os.path.abspath(CONFIG_PATHS[0])
    conf = conf or config.ClientConfig()
    with open(p, "w", encoding="UTF-8") as f:
        f.write(conf.json(indent=4))
    return conf


def get_default_config(_: Optional[pydantic.BaseSettings] = None) -> Dict[str, Any]:
    return config.ClientConfig().dict()
