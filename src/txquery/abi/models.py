"""Pydantic models validating raw JSON ABI entries.

Only function and event entries are modelled; constructor, fallback, receive
and error entries are skipped by the parser.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel


class AbiParam(BaseModel):
    name: str = ""
    type: str
    indexed: bool = False
    internalType: str | None = None
    components: Sequence[AbiParam] | None = None


class AbiFunction(BaseModel):
    name: str
    inputs: Sequence[AbiParam] = ()
    outputs: Sequence[AbiParam] = ()
    stateMutability: str | None = None
    type: Literal["function"] = "function"


class AbiEvent(BaseModel):
    anonymous: bool = False
    inputs: Sequence[AbiParam] = ()
    name: str
    type: Literal["event"]


AbiParam.model_rebuild()
