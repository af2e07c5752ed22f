"""
Identifier validation and normalization for table rows

Table rows are addressed either by a string id or by a numeric id.
Both kinds have a default value (the empty string and ``0``) which
means "no id assigned yet": it's accepted for inserting new rows,
but rejected by every operation that needs to address an existing row.
"""

import enum
import logging
import numbers
import unicodedata
import collections.abc
from typing import Any, Optional

from .. import err, serializer
from ..schemas.identifiers import INT64_MAX, Identifier, NumericId, StringId


logger = logging.getLogger(__name__)

ID_PROPERTY: str = "id"

MAX_STRING_ID_LENGTH: int = 255

RESERVED_CHARACTERS = frozenset('"+/?\\`')

RESERVED_STRING_IDS = frozenset({".", ".."})


@enum.unique
class _IdKind(enum.Enum):
    STRING = enum.auto()
    NUMERIC = enum.auto()
    OTHER = enum.auto()


def _kind_of(value: Any) -> _IdKind:
    if isinstance(value, str):
        return _IdKind.STRING
    if isinstance(value, bool):
        return _IdKind.OTHER
    if isinstance(value, numbers.Integral):
        return _IdKind.NUMERIC
    if isinstance(value, float):
        return _IdKind.NUMERIC
    return _IdKind.OTHER


def _to_numeric(value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise err.InvalidNumericIdentifier(f"The numeric id {value} is not an integer")
    return int(value)


def is_default_string_id(value: Optional[str]) -> bool:
    return value is None or value == ""


def is_valid_string_id(value: Optional[str]) -> bool:
    """
    Determine whether the given string is acceptable as string id

    The default value (``None`` or the empty string) is valid, too.
    Any other string must not be longer than 255 characters, must
    not contain any control character nor any of ``" + / ? \\ ` ``
    and must not be one of the reserved values ``.`` and ``..``.
    """

    if is_default_string_id(value):
        return True
    if len(value) > MAX_STRING_ID_LENGTH or value in RESERVED_STRING_IDS:
        return False
    for c in value:
        if c in RESERVED_CHARACTERS or unicodedata.category(c) == "Cc":
            return False
    return True


def is_default_numeric_id(value: int) -> bool:
    return value == 0


def is_valid_numeric_id(value: int) -> bool:
    return is_default_numeric_id(value) or 0 < value <= INT64_MAX


def find_id_key(entity: collections.abc.Mapping) -> Optional[str]:
    """
    Find the key of the id property in the entity, ignoring the letter case

    :param entity: any entity mapping
    :return: the actual key (e.g. ``"ID"``) or None if no id property exists
    """

    if ID_PROPERTY in entity:
        return ID_PROPERTY
    for key in entity:
        if isinstance(key, str) and key.lower() == ID_PROPERTY:
            return key
    return None


def update_id_property(entity: collections.abc.MutableMapping) -> Optional[str]:
    """
    Rename the id property of the entity to ``id`` in-place

    Callers that need to keep their entity untouched must
    pass a copy, since the old key is removed from the entity.
    Numeric values are stored as integers (e.g. ``7.0`` becomes ``7``).

    :param entity: mutable entity whose id property should be canonicalized
    :return: the key that has been found before renaming or None
    :raises InvalidIdentifierShape: if the id is neither a string nor a number
    :raises InvalidNumericIdentifier: if a numeric id is not integral
    """

    key = find_id_key(entity)
    if key is None:
        return None

    value = entity[key]
    kind = None if value is None else _kind_of(value)
    if kind == _IdKind.OTHER:
        raise err.InvalidIdentifierShape("The id must be numeric or string")
    if kind == _IdKind.NUMERIC:
        value = _to_numeric(value)

    if key != ID_PROPERTY:
        logger.debug(f"Renaming id property {key!r} to {ID_PROPERTY!r}")
        del entity[key]
    entity[ID_PROPERTY] = value
    return key


def _make_identifier(value: Any) -> Identifier:
    kind = _kind_of(value)
    if kind == _IdKind.STRING:
        return StringId(value=value)
    if kind == _IdKind.NUMERIC:
        return NumericId(value=_to_numeric(value))
    raise err.InvalidIdentifierShape("The id must be numeric or string")


def normalize_id(element_or_id: Any) -> Identifier:
    """
    Turn an id value or an entity into its canonical identifier

    Plain strings and integers are used directly. Mutable mappings
    get their id property renamed to ``id`` in-place, see
    :func:`update_id_property`. Any other object is converted
    to a new entity first, which leaves the object untouched.
    The validity of the resulting identifier is not checked here.

    :param element_or_id: string id, numeric id or an entity (or entity-like object)
    :return: the canonical identifier
    :raises MissingIdentifier: if the input is None or has no id property
    :raises InvalidIdentifierShape: if the id value is neither a string nor a number
    """

    if element_or_id is None:
        raise err.MissingIdentifier("Element or id cannot be null")

    if _kind_of(element_or_id) != _IdKind.OTHER:
        return _make_identifier(element_or_id)

    if isinstance(element_or_id, collections.abc.MutableMapping):
        entity = element_or_id
    elif isinstance(element_or_id, bool):
        raise err.InvalidIdentifierShape("The id must be numeric or string")
    else:
        entity = serializer.to_entity(element_or_id)

    update_id_property(entity)
    if entity.get(ID_PROPERTY) is None:
        raise err.MissingIdentifier("You must specify an id property with a valid value")
    return _make_identifier(entity[ID_PROPERTY])


def check_identifier(identifier: Identifier, allow_default: bool = False) -> Identifier:
    """
    Enforce validity of the identifier, rejecting the default value unless allowed

    :raises InvalidStringIdentifier: for malformed (or default) string ids
    :raises InvalidNumericIdentifier: for negative, too large (or default) numeric ids
    """

    if isinstance(identifier, StringId):
        if not is_valid_string_id(identifier.value):
            raise err.InvalidStringIdentifier(f"The string id {identifier.value!r} is invalid")
        if identifier.is_default and not allow_default:
            raise err.InvalidStringIdentifier("The string id must not be empty")
    elif isinstance(identifier, NumericId):
        if not is_valid_numeric_id(identifier.value):
            raise err.InvalidNumericIdentifier(f"The numeric id {identifier.value} is invalid")
        if identifier.is_default and not allow_default:
            raise err.InvalidNumericIdentifier("The numeric id must not be the default value 0")
    else:
        raise err.InvalidIdentifierShape(f"Unknown identifier type {type(identifier).__name__!r}")
    return identifier


def validate_id(element_or_id: Any) -> Identifier:
    """
    Validate an element or id for operations addressing an existing row

    This is used for lookup, update and delete, which all need a
    concrete id, so the default values are rejected as well.
    """

    return check_identifier(normalize_id(element_or_id))


def validate_insert_id(entity: collections.abc.MutableMapping) -> Optional[Identifier]:
    """
    Validate the id of an entity that should be inserted as a new row

    A missing id or the default value is fine, since the service assigns
    ids. Default ids are removed from the entity. Numeric ids
    must always be assigned by the service, while valid string ids
    chosen by the client are accepted.

    :param entity: mutable entity which may be modified in-place
    :return: the client-specified string id or None
    :raises InvalidIdentifier: if the id can't be used for insertion
    """

    update_id_property(entity)
    if entity.get(ID_PROPERTY) is None:
        entity.pop(ID_PROPERTY, None)
        return None

    identifier = check_identifier(_make_identifier(entity[ID_PROPERTY]), allow_default=True)
    if isinstance(identifier, NumericId) and not identifier.is_default:
        raise err.InvalidNumericIdentifier("Can't insert an entity with an existing numeric id")
    if identifier.is_default:
        del entity[ID_PROPERTY]
        return None
    return identifier
