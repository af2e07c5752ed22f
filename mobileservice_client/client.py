"""
Mobile service client holding the service URL, the transport and the settings
"""

import logging
from typing import Optional, Type

import pydantic

from . import settings as _settings, transport as _transport
from .schemas import config
from .tables import MobileServiceTable


logger = logging.getLogger(__name__)


class MobileServiceClient:
    """
    Entry point to access the tables of a single mobile service

    The settings are loaded from the environment and the config file
    when they are not given explicitly. The transport is created from
    the transport section of the settings when not given explicitly.
    Closing the client closes the transport, too.
    """

    app_url: str
    settings: config.ClientConfig
    transport: _transport.Transport

    def __init__(
            self,
            app_url: Optional[str] = None,
            transport: Optional[_transport.Transport] = None,
            settings: Optional[config.ClientConfig] = None
    ):
        self.settings = settings if settings is not None else _settings.Settings()
        url = app_url or self.settings.app_url
        if not url:
            raise ValueError("Invalid mobile service URL")
        self.app_url = str(pydantic.parse_obj_as(pydantic.AnyHttpUrl, str(url)))
        self.transport = transport or _transport.make_transport(self.settings.transport)
        logger.debug(f"Created client for {self.app_url!r} using {type(self.transport).__name__}")

    def get_table(self, name: str, model: Optional[Type[pydantic.BaseModel]] = None) -> MobileServiceTable:
        return MobileServiceTable(name, self, model)

    async def close(self):
        await self.transport.close()

    async def __aenter__(self) -> "MobileServiceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
