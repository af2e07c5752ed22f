"""
Helper functions to make writing unit tests for the mobile service client easier
"""

import queue
import threading
import unittest
import http.server
from typing import Any, Dict, List, Optional, Tuple, Union

from mobileservice_client import MobileServiceClient, serializer
from mobileservice_client.schemas import config
from mobileservice_client.transport import RequestDescriptor, ServiceResponse, Transport

from . import conf


def make_response(
        status: int = 200,
        entity: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None
) -> ServiceResponse:
    return ServiceResponse(
        status=status,
        headers=headers or {},
        content="" if entity is None else serializer.dumps(entity)
    )


class RecordingTransport(Transport):
    """
    Transport that records all requests and answers with queued responses or errors
    """

    requests: List[RequestDescriptor]
    responses: List[Union[ServiceResponse, Exception]]

    def __init__(self):
        self.requests = []
        self.responses = []
        self.closed = False

    async def send(self, request: RequestDescriptor) -> ServiceResponse:
        self.requests.append(request)
        if not self.responses:
            return make_response()
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True


class BaseTableTests(unittest.IsolatedAsyncioTestCase):
    """
    A base class for unit tests of table operations using the recording transport
    """

    transport: RecordingTransport
    client: MobileServiceClient

    def setUp(self) -> None:
        super().setUp()
        self.transport = RecordingTransport()
        self.client = MobileServiceClient(conf.APP_URL, self.transport, config.ClientConfig())
        self.table = self.client.get_table(conf.TABLE_NAME)

    def respond(self, status: int = 200, entity: Optional[Any] = None, headers: Optional[Dict[str, str]] = None):
        self.transport.responses.append(make_response(status, entity, headers))

    def assertNoRequests(self):
        self.assertEqual([], self.transport.requests)

    def assertSingleRequest(self, method: str, url: str) -> RequestDescriptor:
        self.assertEqual(1, len(self.transport.requests), self.transport.requests)
        request = self.transport.requests[0]
        self.assertEqual(method, request.method)
        self.assertEqual(url, request.url)
        return request


class HTTPServerMixin:
    """
    A mixin for unit tests that need a local HTTP server answering requests

    The server answers every request with ``response_status``, ``response_body``
    and ``response_headers`` and puts a tuple of the request method, path,
    headers and body into the ``request_list`` queue.
    """

    server: Optional[http.server.HTTPServer] = None
    server_thread: Optional[threading.Thread] = None

    response_status: int = 200
    response_body: Optional[Any] = None
    response_headers: Dict[str, str] = {}

    class Handler(http.server.BaseHTTPRequestHandler):
        test: "HTTPServerMixin"

        def _handle(self):
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length).decode("UTF-8") if length else None
            self.test.request_list.put((self.command, self.path, dict(self.headers), body))

            content = b""
            if self.test.response_body is not None:
                content = serializer.dumps(self.test.response_body).encode("UTF-8")
            self.send_response(self.test.response_status)
            for k, v in self.test.response_headers.items():
                self.send_header(k, v)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(content)))
            self.end_headers()
            self.wfile.write(content)

        do_GET = _handle
        do_POST = _handle
        do_PATCH = _handle
        do_DELETE = _handle

        def log_message(self, fmt: str, *args: Any) -> None:
            pass

    @property
    def server_uri(self) -> str:
        return f"http://127.0.0.1:{self.server.server_address[1]}/"

    def get_request(self) -> Tuple[str, str, Dict[str, str], Optional[str]]:
        return self.request_list.get(timeout=conf.HTTP_SERVER_START_TIMEOUT)

    def setUp(self) -> None:
        super().setUp()
        self.request_list = queue.Queue()
        self.response_status = 200
        self.response_body = None
        self.response_headers = {}

        handler = type("BoundHandler", (self.Handler,), {"test": self})
        self.server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), handler)
        self.server_thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.server_thread.start()

    def tearDown(self) -> None:
        self.server.shutdown()
        self.server.server_close()
        self.server_thread.join(conf.HTTP_SERVER_START_TIMEOUT)
        super().tearDown()


class BaseHTTPServerTests(HTTPServerMixin, unittest.IsolatedAsyncioTestCase):
    pass
