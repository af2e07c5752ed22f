"""
Conversion between typed objects and the entities sent over the wire
"""

import collections.abc
from typing import Any, Dict, Optional, Type

try:
    import ujson as json
except ImportError:
    import json

import pydantic

from . import err


Entity = Dict[str, Any]


def to_entity(obj: Any) -> Entity:
    """
    Convert an arbitrary object into a new entity dictionary

    Mappings are shallowly copied, pydantic models are exported
    with their ``dict`` method and any other object with an
    instance dictionary is converted using its public attributes.

    :param obj: mapping, pydantic model or plain object
    :return: new dictionary which doesn't share its top level with ``obj``
    :raises InvalidIdentifierShape: if the object can't be represented as an entity
    """

    if isinstance(obj, collections.abc.Mapping):
        return dict(obj)
    if isinstance(obj, pydantic.BaseModel):
        return obj.dict()
    if isinstance(obj, (str, bytes, int, float, bool, collections.abc.Iterable)):
        raise err.InvalidIdentifierShape(f"Object of type {type(obj).__name__!r} is no entity")
    try:
        return {k: v for k, v in vars(obj).items() if not k.startswith("_") or k.startswith("__")}
    except TypeError as exc:
        raise err.InvalidIdentifierShape(f"Object of type {type(obj).__name__!r} is no entity") from exc


def from_entity(entity: Entity, model: Optional[Type[pydantic.BaseModel]] = None) -> Any:
    if model is None:
        return entity
    return model.parse_obj(entity)


def dumps(obj: Any) -> str:
    return json.dumps(obj)


def loads(text: str) -> Any:
    return json.loads(text)
