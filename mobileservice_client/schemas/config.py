"""
Special schemas for the configuration file and its properties
"""

from typing import Dict, List, Optional, Union

import pydantic


_SYSTEM_PROPERTY_NAMES = {"createdat", "updatedat", "version", "*"}


class TransportConfig(pydantic.BaseModel):
    backend: pydantic.constr(regex=r"^(aiohttp|requests)$") = "aiohttp"
    timeout: pydantic.PositiveFloat = 30.0
    user_agent: Optional[pydantic.constr(max_length=255)] = None


class LoggingConfig(pydantic.BaseModel):
    version: pydantic.conint(ge=1, le=1) = 1
    disable_existing_loggers: bool = False
    incremental: bool = False
    filters: Dict[str, Dict[str, Union[str, list]]] = {
        "urllib3_no_debug": {
            "()": "mobileservice_client.misc.logger.NoDebugFilter",
            "name": "urllib3"
        },
        "aiohttp_no_debug": {
            "()": "mobileservice_client.misc.logger.NoDebugFilter",
            "name": "aiohttp"
        }
    }
    formatters: Dict[str, Dict[str, str]] = {
        "default": {
            "style": "{",
            "format": "{asctime}: mobileservice {process}: [{levelname}] {name}: {message}",
            "datefmt": "%d.%m.%Y %H:%M:%S"
        }
    }
    loggers: Dict[str, dict] = {}
    handlers: Dict[str, Dict[str, Union[str, list]]] = {
        "default": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "default",
            "filters": ["urllib3_no_debug", "aiohttp_no_debug"]
        }
    }
    root: dict = {
        "level": "WARNING",
        "handlers": ["default"]
    }


class ClientConfig(pydantic.BaseModel):
    app_url: Optional[pydantic.AnyHttpUrl] = None
    system_properties: List[str] = []
    transport: TransportConfig = TransportConfig()
    logging: LoggingConfig = LoggingConfig()

    @pydantic.validator("system_properties", each_item=True)
    def enforce_known_system_properties(
            value: str  # noqa
    ):
        name = value.strip()
        if name.startswith("__"):
            name = name[2:]
        if name.lower() not in _SYSTEM_PROPERTY_NAMES:
            raise ValueError(f"Unknown system property {value!r}")
        return name
