"""
Mobile service client unit tests for the transports using a local HTTP server
"""

import socket
import unittest

from mobileservice_client import MobileServiceClient, SystemProperty, err, serializer
from mobileservice_client.schemas import config
from mobileservice_client.transport import (
    AiohttpTransport,
    RequestDescriptor,
    RequestsTransport,
    ServiceResponse,
    make_transport
)
from mobileservice_client.version import USER_AGENT

from . import conf, utils


def _get_unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class RequestDescriptorTests(unittest.TestCase):
    def test_url(self):
        request = RequestDescriptor(method="GET", base_url="http://localhost/app/", path="/tables/x")
        self.assertEqual("http://localhost/app/tables/x", request.url)
        request = RequestDescriptor(
            method="GET",
            base_url="http://localhost",
            path="tables/x",
            parameters=[("a", "1 2"), ("__systemproperties", "__createdAt,__version"), ("b", "*")]
        )
        self.assertEqual(
            "http://localhost/tables/x?a=1%202&__systemproperties=__createdAt,__version&b=*",
            request.url
        )

    def test_headers_and_data(self):
        request = RequestDescriptor(method="DELETE", base_url="http://localhost", path="tables/x/1")
        self.assertEqual({"Accept": "application/json"}, request.get_request_headers())
        self.assertIsNone(request.get_request_data())

        request = RequestDescriptor(
            method="PATCH",
            base_url="http://localhost",
            path="tables/x/1",
            headers={"If-Match": '"1"'},
            body={"text": "foo"}
        )
        headers = request.get_request_headers()
        self.assertEqual("application/json", headers["Content-Type"])
        self.assertEqual('"1"', headers["If-Match"])
        self.assertEqual({"text": "foo"}, serializer.loads(request.get_request_data()))

    def test_response(self):
        response = ServiceResponse(status=200, headers={"ETag": '"x"'}, content='{"id": 1}')
        self.assertTrue(response.ok)
        self.assertEqual('"x"', response.get_header("etag"))
        self.assertIsNone(response.get_header("Location"))
        self.assertEqual({"id": 1}, response.content_json())
        self.assertIsNone(ServiceResponse(status=204).content_json())
        self.assertFalse(ServiceResponse(status=409).ok)

    def test_make_transport(self):
        self.assertIsInstance(make_transport(), AiohttpTransport)
        self.assertIsInstance(make_transport(config.TransportConfig(backend="requests")), RequestsTransport)
        transport = make_transport(config.TransportConfig(backend="requests", timeout=2, user_agent="foo"))
        self.assertEqual(2, transport.timeout)
        self.assertEqual("foo", transport.session.headers["User-Agent"])


class AiohttpTransportTests(utils.BaseHTTPServerTests):
    async def asyncSetUp(self) -> None:
        self.transport = AiohttpTransport(conf.TRANSPORT_TIMEOUT)
        self.client = MobileServiceClient(self.server_uri, self.transport, config.ClientConfig())

    async def asyncTearDown(self) -> None:
        await self.client.close()

    async def test_delete(self):
        table = self.client.get_table("todo")
        table.system_properties = SystemProperty.all()
        response = await table.delete({"ID": "abc123"}, {"force": "true"})
        self.assertEqual(200, response.status)

        method, path, headers, body = self.get_request()
        self.assertEqual("DELETE", method)
        self.assertEqual("/tables/todo/abc123?force=true&__systemproperties=*", path)
        self.assertEqual(USER_AGENT, headers.get("User-Agent"))
        self.assertIsNone(body)

    async def test_insert(self):
        self.response_status = 201
        self.response_body = {"id": "new", "text": "foo"}
        result = await self.client.get_table("todo").insert({"text": "foo", "__updatedAt": "now"})
        self.assertEqual({"id": "new", "text": "foo", "__updatedAt": "now"}, result)

        method, path, headers, body = self.get_request()
        self.assertEqual("POST", method)
        self.assertEqual("/tables/todo", path)
        self.assertEqual({"text": "foo"}, serializer.loads(body))

    async def test_error_status(self):
        self.response_status = 404
        self.response_body = {"error": "missing"}
        with self.assertRaises(err.ServiceResponseError) as cm:
            await self.client.get_table("todo").lookup(5)
        self.assertEqual(404, cm.exception.status)

    async def test_connection_failure(self):
        transport = AiohttpTransport(conf.TRANSPORT_TIMEOUT)
        client = MobileServiceClient(f"http://127.0.0.1:{_get_unused_port()}/", transport, config.ClientConfig())
        calls = []
        async with client:
            await client.get_table("todo").delete(1, callback=lambda e, r: calls.append((e, r)))
        self.assertEqual(1, len(calls))
        self.assertIsInstance(calls[0][0], err.TransportFailure)
        self.assertIsNotNone(calls[0][0].__cause__)
        self.assertIsNone(transport.client_session)


class RequestsTransportTests(utils.BaseHTTPServerTests):
    async def asyncSetUp(self) -> None:
        self.transport = RequestsTransport(conf.TRANSPORT_TIMEOUT)
        self.client = MobileServiceClient(self.server_uri, self.transport, config.ClientConfig())

    async def asyncTearDown(self) -> None:
        await self.client.close()

    async def test_update(self):
        self.response_body = {"id": "abc", "text": "bar"}
        self.response_headers = {"ETag": '"v2"'}
        table = self.client.get_table("todo items")
        result = await table.update({"id": "abc", "text": "bar", "__version": "v1"})
        self.assertEqual({"id": "abc", "text": "bar", "__version": "v2"}, result)

        method, path, headers, body = self.get_request()
        self.assertEqual("PATCH", method)
        self.assertEqual("/tables/todo%20items/abc", path)
        self.assertEqual('"v1"', headers.get("If-Match"))
        self.assertEqual({"id": "abc", "text": "bar"}, serializer.loads(body))

    async def test_read(self):
        self.response_body = [{"id": 1}, {"id": 2}]
        table = self.client.get_table("todo")
        table.system_properties = {SystemProperty.CreatedAt}
        self.assertEqual([{"id": 1}, {"id": 2}], await table.read())
        method, path, headers, body = self.get_request()
        self.assertEqual("GET", method)
        self.assertEqual("/tables/todo?__systemproperties=__createdAt", path)

    async def test_connection_failure(self):
        transport = RequestsTransport(conf.TRANSPORT_TIMEOUT)
        client = MobileServiceClient(f"http://127.0.0.1:{_get_unused_port()}/", transport, config.ClientConfig())
        with self.assertRaises(err.TransportFailure) as cm:
            await client.get_table("todo").lookup("abc")
        self.assertIsNotNone(cm.exception.__cause__)
        await client.close()


if __name__ == "__main__":
    unittest.main()
