"""
ETag helper library for optimistic concurrency of table rows

The version system property of a row is sent to the service as
ETag in the ``If-Match`` header and returned in the ``ETag`` header.
ETags are surrounded by double quotes, while any double quote
inside the ETag value must be escaped with a backslash.
"""

from typing import Optional


def get_etag_from_value(value: str) -> str:
    """
    Create a valid, quoted ETag from the given value

    Every double quote in the value that isn't already preceded
    by a backslash gets escaped, then the result is quoted.

    :param value: unescaped value, e.g. the version of a row
    :return: ETag as used in HTTP headers
    """

    escaped = []
    for i, c in enumerate(value):
        if c == '"' and (i == 0 or value[i - 1] != "\\"):
            escaped.append("\\")
        escaped.append(c)
    return '"' + "".join(escaped) + '"'


def get_value_from_etag(etag: str) -> str:
    """
    Get the unescaped value from the given ETag

    Exactly one leading and one trailing double quote are removed
    when both are present. Tags shorter than two characters are
    not unquoted, only unescaped.

    :param etag: ETag as received in HTTP headers
    :return: value of the ETag, e.g. the version of a row
    """

    if len(etag) >= 2 and etag.startswith('"') and etag.endswith('"'):
        etag = etag[1:-1]
    return etag.replace('\\"', '"')


def get_if_match_header(version: Optional[str]) -> dict:
    if version is None:
        return {}
    return {"If-Match": get_etag_from_value(version)}
