"""
Schemas for the canonical identifier of a table row

Any accepted input shape (a plain string, a plain integer or
an entity carrying an id property) is turned into exactly one
of the two identifier variants defined here, so that all
further checks only ever deal with these two classes.
"""

from typing import Union

import pydantic


INT64_MAX = 2**63 - 1


class StringId(pydantic.BaseModel):
    value: str

    class Config:
        frozen = True

    @property
    def is_default(self) -> bool:
        return self.value == ""

    def __str__(self) -> str:
        return self.value


class NumericId(pydantic.BaseModel):
    value: pydantic.StrictInt

    class Config:
        frozen = True

    @property
    def is_default(self) -> bool:
        return self.value == 0

    def __str__(self) -> str:
        return str(self.value)


Identifier = Union[StringId, NumericId]
