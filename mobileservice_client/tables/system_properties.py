"""
System properties of table rows and their representation on the wire

System properties are metadata fields managed by the service,
e.g. the creation timestamp or the version of a row. Their
names always start with ``__``. Which of them should be returned
by the service is requested with the ``__systemproperties``
query parameter.
"""

import copy
import enum
import collections.abc
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union


SYSTEM_PROPERTY_PREFIX: str = "__"

SYSTEM_PROPERTIES_QUERY_PARAMETER: str = "__systemproperties"

ALL_SYSTEM_PROPERTIES_WILDCARD: str = "*"

Parameters = Union[Mapping[str, str], Sequence[Tuple[str, str]]]


@enum.unique
class SystemProperty(enum.Enum):
    """
    Known system properties in their canonical order
    """

    CreatedAt = "CreatedAt"
    UpdatedAt = "UpdatedAt"
    Version = "Version"

    @property
    def property_name(self) -> str:
        """
        Name of the property as used in entities and on the wire, e.g. ``__createdAt``
        """

        return SYSTEM_PROPERTY_PREFIX + self.value[0].lower() + self.value[1:]

    @classmethod
    def all(cls) -> FrozenSet["SystemProperty"]:
        return frozenset(cls)

    @classmethod
    def from_name(cls, name: str) -> FrozenSet["SystemProperty"]:
        """
        Look up system properties by name, ignoring case and an optional ``__`` prefix

        The wildcard ``*`` stands for all known system properties.

        :raises ValueError: if the name doesn't denote a known system property
        """

        key = name.strip()
        if key == ALL_SYSTEM_PROPERTIES_WILDCARD:
            return cls.all()
        if key.startswith(SYSTEM_PROPERTY_PREFIX):
            key = key[len(SYSTEM_PROPERTY_PREFIX):]
        try:
            return frozenset({_BY_LOWER_NAME[key.lower()]})
        except KeyError:
            raise ValueError(f"Unknown system property {name!r}") from None


_BY_LOWER_NAME: Dict[str, SystemProperty] = {p.value.lower(): p for p in SystemProperty}

VERSION_PROPERTY: str = SystemProperty.Version.property_name


def parse_system_properties(names: Optional[Iterable[Union[str, SystemProperty]]]) -> FrozenSet[SystemProperty]:
    result = set()
    for name in names or []:
        if isinstance(name, SystemProperty):
            result.add(name)
        else:
            result.update(SystemProperty.from_name(name))
    return frozenset(result)


def encode_system_properties(requested: Optional[Iterable[SystemProperty]]) -> Optional[str]:
    """
    Encode the requested system properties as value of the query parameter

    :param requested: set of system properties or None
    :return: None for no requested properties, ``*`` for all known
        properties or the comma-separated list of the property names
    """

    requested = set(requested or [])
    if not requested:
        return None
    if requested >= SystemProperty.all():
        return ALL_SYSTEM_PROPERTIES_WILDCARD
    return ",".join(p.property_name for p in SystemProperty if p in requested)


def normalize_parameters(parameters: Optional[Parameters]) -> List[Tuple[str, str]]:
    if parameters is None:
        return []
    if isinstance(parameters, collections.abc.Mapping):
        return [(str(k), str(v)) for k, v in parameters.items()]
    return [(str(k), str(v)) for k, v in parameters]


def add_system_properties(
        requested: Optional[Iterable[SystemProperty]],
        parameters: Optional[Parameters] = None
) -> List[Tuple[str, str]]:
    """
    Add the query parameter for the requested system properties to the parameters

    An existing ``__systemproperties`` parameter (in any letter case)
    takes precedence, so nothing is added in that case.

    :param requested: system properties configured for the table
    :param parameters: user-defined query parameters, which are left untouched
    :return: new list of query parameters
    """

    result = normalize_parameters(parameters)
    if any(k.lower() == SYSTEM_PROPERTIES_QUERY_PARAMETER for k, _ in result):
        return result

    encoded = encode_system_properties(requested)
    if encoded is not None:
        result.append((SYSTEM_PROPERTIES_QUERY_PARAMETER, encoded))
    return result


def is_system_property(key: str) -> bool:
    return isinstance(key, str) and key.startswith(SYSTEM_PROPERTY_PREFIX)


def remove_system_properties(entity: Mapping) -> Mapping:
    """
    Remove all system properties from the entity without modifying it

    The entity is deep-copied once, when the first system property is
    found. Entities without system properties are returned as they are,
    so the result may be the very same object as the argument.
    """

    if not isinstance(entity, collections.abc.Mapping):
        raise TypeError(f"Expected entity mapping, got {type(entity).__name__!r}")

    result = entity
    for key in list(entity.keys()):
        if is_system_property(key):
            if result is entity:
                result = copy.deepcopy(entity)
            del result[key]
    return result


def get_version_system_property(entity: Mapping) -> Optional[str]:
    """
    Get the value of the version system property, ignoring the letter case of its name
    """

    for key, value in entity.items():
        if isinstance(key, str) and key.lower() == VERSION_PROPERTY.lower():
            return None if value is None else str(value)
    return None
