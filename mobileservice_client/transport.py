"""
Mobile service client library to send requests to the remote service
"""

import abc
import asyncio
import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
import pydantic
import requests

from . import err, serializer
from .schemas import config
from .version import USER_AGENT


logger = logging.getLogger(__name__)


class RequestDescriptor(pydantic.BaseModel):
    """
    Description of a single outbound request of a table operation
    """

    method: str
    base_url: str
    path: str
    parameters: List[Tuple[str, str]] = []
    headers: Dict[str, str] = {}
    body: Optional[Any] = None

    @property
    def url(self) -> str:
        url = self.base_url.rstrip("/") + "/" + self.path.lstrip("/")
        if self.parameters:
            url += "?" + urllib.parse.urlencode(self.parameters, safe="*,", quote_via=urllib.parse.quote)
        return url

    def get_request_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.body is not None:
            headers["Content-Type"] = "application/json"
        headers.update(self.headers)
        return headers

    def get_request_data(self) -> Optional[str]:
        if self.body is None:
            return None
        return serializer.dumps(self.body)


class ServiceResponse(pydantic.BaseModel):
    """
    Response of the remote service, as returned by any transport
    """

    status: int
    headers: Dict[str, str] = {}
    content: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def get_header(self, name: str) -> Optional[str]:
        name = name.lower()
        for k, v in self.headers.items():
            if k.lower() == name:
                return v
        return None

    def content_json(self) -> Any:
        if not self.content:
            return None
        return serializer.loads(self.content)


class Transport(abc.ABC):
    """
    Base class of the transports sending requests to the remote service

    Every call to :meth:`send` results in exactly one request,
    failed requests are never retried. Any failure of the underlying
    HTTP library must be raised as :class:`TransportFailure`.
    """

    @abc.abstractmethod
    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        pass

    async def close(self):
        pass


class AiohttpTransport(Transport):
    """
    Transport using one lazily created ``aiohttp`` client session
    """

    client_session: Optional[aiohttp.ClientSession]

    def __init__(self, timeout: float = 30.0, user_agent: Optional[str] = None):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.user_agent = user_agent or USER_AGENT
        self.client_session = None

    def _init(self):
        if self.client_session is None or self.client_session.closed:
            self.client_session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )

    async def close(self):
        if self.client_session is not None:
            await self.client_session.close()
            self.client_session = None

    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        self._init()
        url = request.url
        logger.debug(f"Sending '{request.method} {url}' using aiohttp")
        try:
            async with self.client_session.request(
                    request.method,
                    url,
                    data=request.get_request_data(),
                    headers=request.get_request_headers()
            ) as response:
                return ServiceResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    content=await response.text()
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.info(f"{type(exc).__name__} during request '{request.method} {url}': {exc!s}")
            raise err.TransportFailure(f"Request '{request.method} {url}' failed: {exc!s}") from exc


class RequestsTransport(Transport):
    """
    Transport using a blocking ``requests`` session in the default executor of the event loop
    """

    session: requests.Session

    def __init__(self, timeout: float = 30.0, user_agent: Optional[str] = None):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent or USER_AGENT

    async def close(self):
        self.session.close()

    def send_blocking(self, request: RequestDescriptor) -> ServiceResponse:
        url = request.url
        logger.debug(f"Sending '{request.method} {url}' using requests")
        try:
            response = self.session.request(
                request.method,
                url,
                data=request.get_request_data(),
                headers=request.get_request_headers(),
                timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.info(f"{type(exc).__name__} during request '{request.method} {url}': {exc!s}")
            raise err.TransportFailure(f"Request '{request.method} {url}' failed: {exc!s}") from exc
        return ServiceResponse(status=response.status_code, headers=dict(response.headers), content=response.text)

    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.send_blocking, request)


def make_transport(conf: Optional[config.TransportConfig] = None) -> Transport:
    conf = conf or config.TransportConfig()
    if conf.backend == "requests":
        return RequestsTransport(conf.timeout, conf.user_agent)
    return AiohttpTransport(conf.timeout, conf.user_agent)
