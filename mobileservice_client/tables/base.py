"""
Mobile service table library to shape and dispatch table operations

Every operation is a coroutine which never raises before it gets
awaited. Local failures (e.g. an invalid id) and remote failures
(e.g. a broken connection) are reported through the same channel:
either by calling the optional completion callback exactly once
with ``(error, result)``, or by raising the error when no
callback has been given. Local failures never reach the transport.
Any unexpected failure of the transport becomes a TransportFailure,
an answer that can't be parsed becomes a ServiceResponseError.
"""

import inspect
import logging
import urllib.parse
import collections.abc
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, List, Optional, Type, Union

import pydantic

from . import entities, etag, identifiers, system_properties
from .system_properties import Parameters, SystemProperty
from .. import err, serializer
from ..misc.logger import enforce_logger
from ..schemas.identifiers import Identifier
from ..transport import RequestDescriptor, ServiceResponse


TABLES_PATH: str = "tables/"

CompletionCallback = Callable[[Optional[Exception], Any], Any]


async def _invoke_callback(callback: CompletionCallback, error: Optional[Exception], result: Any):
    outcome = callback(error, result)
    if inspect.isawaitable(outcome):
        await outcome


class MobileServiceTable:
    """
    Client-side representation of a single table of the mobile service

    Results are entity dictionaries by default. If a pydantic
    model class is given, results are parsed into that model.
    """

    model: Optional[Type[pydantic.BaseModel]]

    def __init__(
            self,
            name: str,
            client: "MobileServiceClient",  # noqa
            model: Optional[Type[pydantic.BaseModel]] = None,
            logger: Optional[logging.Logger] = None
    ):
        if name is None or not isinstance(name, str) or name.strip() == "":
            raise ValueError("Invalid table name")
        if client is None:
            raise ValueError("Invalid mobile service client")

        self._name = name
        self._client = client
        self.model = model
        self.logger = enforce_logger(logger or logging.getLogger(__name__))
        self._system_properties = system_properties.parse_system_properties(
            getattr(client.settings, "system_properties", None)
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def client(self) -> "MobileServiceClient":  # noqa
        return self._client

    @property
    def system_properties(self) -> FrozenSet[SystemProperty]:
        return self._system_properties

    @system_properties.setter
    def system_properties(self, value: Optional[Iterable[Union[str, SystemProperty]]]):
        self._system_properties = system_properties.parse_system_properties(value)

    def _get_table_path(self) -> str:
        try:
            return TABLES_PATH + urllib.parse.quote(self._name, safe="", encoding="utf-8", errors="strict")
        except UnicodeEncodeError as exc:
            raise err.EncodingFailure(f"Table name {self._name!r} can't be encoded") from exc

    def _get_row_path(self, identifier: Identifier) -> str:
        try:
            segment = urllib.parse.quote(str(identifier), safe="", encoding="utf-8", errors="strict")
        except UnicodeEncodeError as exc:
            raise err.EncodingFailure(f"Id {str(identifier)!r} can't be encoded") from exc
        return self._get_table_path() + "/" + segment

    def _make_request(
            self,
            method: str,
            path: str,
            parameters: Optional[Parameters] = None,
            headers: Optional[dict] = None,
            body: Optional[Any] = None
    ) -> RequestDescriptor:
        return RequestDescriptor(
            method=method,
            base_url=self._client.app_url,
            path=path,
            parameters=system_properties.add_system_properties(self._system_properties, parameters),
            headers=headers or {},
            body=body
        )

    async def _send(self, request: RequestDescriptor) -> ServiceResponse:
        try:
            response = await self._client.transport.send(request)
        except err.MobileServiceException:
            raise
        except Exception as exc:
            self.logger.info(f"{type(exc).__name__} during request '{request.method} {request.path}': {exc!s}")
            raise err.TransportFailure(f"Request '{request.method} {request.path}' failed: {exc!s}") from exc
        self.logger.debug(f"'{request.method} {request.path}' completed with status {response.status}")
        if not response.ok:
            raise err.ServiceResponseError(
                f"Request '{request.method} {request.path}' failed with status {response.status}",
                response
            )
        return response

    async def _complete(self, operation: Awaitable, callback: Optional[CompletionCallback]) -> Any:
        try:
            result = await operation
        except err.MobileServiceException as exc:
            if callback is None:
                raise
            self.logger.debug(f"Operation on table {self._name!r} failed: {type(exc).__name__}: {exc}")
            await _invoke_callback(callback, exc, None)
            return None
        if callback is not None:
            await _invoke_callback(callback, None, result)
        return result

    @staticmethod
    def _to_entity(element: Any) -> dict:
        if element is None:
            raise err.MissingIdentifier("The entity cannot be null")
        if isinstance(element, collections.abc.Mapping):
            return entities.clone_entity(element)
        return entities.clone_entity(serializer.to_entity(element))

    @staticmethod
    def _read_content(response: ServiceResponse) -> Any:
        try:
            return response.content_json()
        except ValueError as exc:
            raise err.ServiceResponseError("The service didn't return valid JSON", response) from exc

    def _read_entity(self, response: ServiceResponse) -> dict:
        content = self._read_content(response)
        if not isinstance(content, collections.abc.Mapping):
            raise err.ServiceResponseError("The service didn't return a valid entity", response)
        content = dict(content)
        tag = response.get_header("ETag")
        if tag:
            content[system_properties.VERSION_PROPERTY] = etag.get_value_from_etag(tag)
        return content

    def _make_result(self, entity: Any, response: ServiceResponse) -> Any:
        try:
            return serializer.from_entity(entity, self.model)
        except pydantic.ValidationError as exc:
            raise err.ServiceResponseError(
                f"The entity returned by the service doesn't match {self.model.__name__}",
                response
            ) from exc

    async def delete(
            self,
            element_or_id: Any,
            parameters: Optional[Parameters] = None,
            callback: Optional[CompletionCallback] = None
    ) -> Optional[ServiceResponse]:
        """
        Delete a row from the table

        Entity dictionaries get their id property renamed to
        ``id`` in-place (e.g. ``ID`` becomes ``id``).

        :param element_or_id: the entity to delete or its string or numeric id
        :param parameters: user-defined query parameters as mapping or list of pairs
        :param callback: optional callable accepting ``(error, response)``
        :return: the unmodified response of the service (None if the callback got an error)
        """

        return await self._complete(self._delete(element_or_id, parameters), callback)

    async def _delete(self, element_or_id: Any, parameters: Optional[Parameters]) -> ServiceResponse:
        identifier = identifiers.validate_id(element_or_id)
        request = self._make_request("DELETE", self._get_row_path(identifier), parameters)
        return await self._send(request)

    async def lookup(
            self,
            id: Any,  # noqa
            parameters: Optional[Parameters] = None,
            callback: Optional[CompletionCallback] = None
    ) -> Any:
        """
        Look up a single row of the table by its id
        """

        return await self._complete(self._lookup(id, parameters), callback)

    async def _lookup(self, id: Any, parameters: Optional[Parameters]) -> Any:  # noqa
        identifier = identifiers.validate_id(id)
        response = await self._send(self._make_request("GET", self._get_row_path(identifier), parameters))
        return self._make_result(self._read_entity(response), response)

    async def read(
            self,
            parameters: Optional[Parameters] = None,
            callback: Optional[CompletionCallback] = None
    ) -> Optional[List[Any]]:
        """
        Read all rows of the table the service returns for the given query parameters
        """

        return await self._complete(self._read(parameters), callback)

    async def _read(self, parameters: Optional[Parameters]) -> List[Any]:
        response = await self._send(self._make_request("GET", self._get_table_path(), parameters))
        content = self._read_content(response)
        if isinstance(content, collections.abc.Mapping) and "results" in content:
            content = content["results"]
        if not isinstance(content, list):
            raise err.ServiceResponseError("The service didn't return a list of entities", response)
        return [self._make_result(e, response) for e in content]

    async def insert(
            self,
            element: Any,
            parameters: Optional[Parameters] = None,
            callback: Optional[CompletionCallback] = None
    ) -> Any:
        """
        Insert a new row into the table

        System properties are not sent to the service. The result is
        a copy of the given entity patched with the service's answer,
        the given element itself is never modified.

        :param element: the entity (or model instance) to insert
        :param parameters: user-defined query parameters as mapping or list of pairs
        :param callback: optional callable accepting ``(error, result)``
        :return: the inserted entity as returned by the service
        """

        return await self._complete(self._insert(element, parameters), callback)

    async def _insert(self, element: Any, parameters: Optional[Parameters]) -> Any:
        entity = self._to_entity(element)
        identifiers.validate_insert_id(entity)
        payload = system_properties.remove_system_properties(entity)
        response = await self._send(self._make_request("POST", self._get_table_path(), parameters, body=payload))
        result = self._read_entity(response)
        return self._make_result(entities.patch_original_entity(entity, result), response)

    async def update(
            self,
            element: Any,
            parameters: Optional[Parameters] = None,
            callback: Optional[CompletionCallback] = None
    ) -> Any:
        """
        Update an existing row of the table

        The version system property of the entity, if present, is sent as
        ``If-Match`` header to detect mid-air collisions. The ETag of the
        response becomes the version of the returned entity. The given
        element itself is never modified.

        :param element: the entity (or model instance) to update
        :param parameters: user-defined query parameters as mapping or list of pairs
        :param callback: optional callable accepting ``(error, result)``
        :return: the updated entity as returned by the service
        """

        return await self._complete(self._update(element, parameters), callback)

    async def _update(self, element: Any, parameters: Optional[Parameters]) -> Any:
        entity = self._to_entity(element)
        identifier = identifiers.validate_id(entity)
        headers = etag.get_if_match_header(system_properties.get_version_system_property(entity))
        payload = system_properties.remove_system_properties(entity)
        request = self._make_request("PATCH", self._get_row_path(identifier), parameters, headers, payload)
        response = await self._send(request)
        result = self._read_entity(response)
        return self._make_result(entities.patch_original_entity(entity, result), response)
