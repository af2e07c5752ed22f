"""
Helpers to combine entities sent to the service with the service's answers
"""

import copy
import collections.abc
from typing import Any, Dict, Mapping


def clone_entity(entity: Mapping[str, Any]) -> Dict[str, Any]:
    return copy.deepcopy(dict(entity))


def patch_original_entity(original: Mapping[str, Any], response: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Patch the original entity with the one returned by the service

    The original entity is deep-copied first and is never modified.
    Properties of the response override those of the original
    entity, while properties only present in the original are kept.

    :param original: entity as sent by the caller
    :param response: entity as returned by the service
    :return: new entity holding the merged properties
    """

    if not isinstance(response, collections.abc.Mapping):
        raise TypeError(f"Expected entity mapping in response, got {type(response).__name__!r}")

    patched = clone_entity(original)
    for key, value in response.items():
        patched[key] = copy.deepcopy(value)
    return patched
