"""Schema model: functions and events parsed once from a JSON ABI.

Defines lightweight frozen dataclasses consumed by the resolver and the
query builder:
- `Param`: one parameter with its canonical type and head footprint
- `FunctionFragment` / `EventFragment`: named parameter lists + selector/topic
- `ContractSchema`: all fragments of one contract, overloads preserved

Raw ABI entries are never inspected again after `parse_abi`.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import ABIType, TupleType, normalize, parse
from eth_utils import function_signature_to_4byte_selector
from eth_utils.abi import event_signature_to_log_topic
from pydantic import ValidationError

from txquery.abi.models import AbiEvent, AbiFunction, AbiParam
from txquery.constants import WORD_SIZE
from txquery.core.errors import AbiNotFoundError, MalformedAbiError, UnknownArgumentError
from txquery.core.interfaces import AbiSource


@dataclass(frozen=True)
class Param:
    """One function/event parameter reduced to what offset resolution needs."""

    name: str
    type: str  # canonical, e.g. "uint256", "(address,bytes)[]"
    is_dynamic: bool
    indexed: bool = False
    head_words: int = 1  # inline words in the head (1 for dynamic params)

    @property
    def head_size(self) -> int:
        return self.head_words * WORD_SIZE

    @property
    def is_bytes_like(self) -> bool:
        """True for `bytes` / `string`, whose length word counts bytes."""
        return self.type in ("bytes", "string")

    @property
    def has_length_prefix(self) -> bool:
        """True when the tail entry starts with a length word (bytes, string, T[])."""
        return self.is_bytes_like or self.type.endswith("[]")

    @property
    def is_value_type(self) -> bool:
        """True for elementary static types; only these are stored verbatim as topics."""
        return not self.is_dynamic and not self.type.endswith("]") and not self.type.startswith("(")


def _param_index(owner: str, params: tuple[Param, ...], name: str) -> int:
    for i, p in enumerate(params):
        if p.name == name:
            return i
    known = ", ".join(p.name for p in params) or "<none>"
    raise UnknownArgumentError(f"{owner} has no parameter {name!r} (known: {known})")


@dataclass(frozen=True)
class FunctionFragment:
    name: str
    params: tuple[Param, ...]
    signature: str
    selector: bytes

    def param_index(self, name: str) -> int:
        """Position of `name` in the call data head; raises UnknownArgumentError."""
        return _param_index(f"function {self.signature}", self.params, name)


@dataclass(frozen=True)
class EventFragment:
    name: str
    params: tuple[Param, ...]
    signature: str
    topic: bytes
    anonymous: bool = False

    @property
    def indexed_params(self) -> tuple[Param, ...]:
        return tuple(p for p in self.params if p.indexed)

    @property
    def data_params(self) -> tuple[Param, ...]:
        return tuple(p for p in self.params if not p.indexed)

    @property
    def topic_count(self) -> int:
        """Number of topics a log emitted by this event carries."""
        return len(self.indexed_params) + (0 if self.anonymous else 1)

    def param(self, name: str) -> Param:
        return self.params[_param_index(f"event {self.signature}", self.params, name)]


@dataclass(frozen=True)
class ContractSchema:
    functions: tuple[FunctionFragment, ...] = ()
    events: tuple[EventFragment, ...] = ()

    def functions_named(self, name: str) -> list[FunctionFragment]:
        return [f for f in self.functions if f.name == name]

    def events_named(self, name: str) -> list[EventFragment]:
        return [e for e in self.events if e.name == name]


# ---- Helpers: canonical types and head footprint ----


def canonical_type(param: AbiParam) -> str:
    """Render the canonical ABI type, expanding tuples from their components."""
    if param.type.startswith("tuple"):
        suffix = param.type[len("tuple"):]
        inner = ",".join(canonical_type(c) for c in param.components or ())
        return f"({inner}){suffix}"
    return normalize(param.type)


def _head_words(abi_type: ABIType) -> int:
    """Number of words a value of `abi_type` occupies inline in a head."""
    if abi_type.is_dynamic:
        return 1
    if abi_type.is_array:
        return abi_type.arrlist[-1][0] * _head_words(abi_type.item_type)
    if isinstance(abi_type, TupleType):
        return sum(_head_words(c) for c in abi_type.components)
    return 1


def _make_param(raw: AbiParam, fallback_name: str, *, allow_indexed: bool) -> Param:
    type_str = canonical_type(raw)
    try:
        abi_type = parse(type_str)
        abi_type.validate()
    except (ParseError, ABITypeError) as e:
        raise MalformedAbiError(f"invalid ABI type {raw.type!r}: {e}") from e
    return Param(
        name=raw.name or fallback_name,
        type=type_str,
        is_dynamic=abi_type.is_dynamic,
        indexed=raw.indexed and allow_indexed,
        head_words=_head_words(abi_type),
    )


def _make_params(inputs: Iterable[AbiParam], *, allow_indexed: bool) -> tuple[Param, ...]:
    return tuple(
        _make_param(p, f"arg{i}", allow_indexed=allow_indexed) for i, p in enumerate(inputs)
    )


def _signature(name: str, params: tuple[Param, ...]) -> str:
    return f"{name}({','.join(p.type for p in params)})"


def function_fragment(entry: AbiFunction) -> FunctionFragment:
    params = _make_params(entry.inputs, allow_indexed=False)
    signature = _signature(entry.name, params)
    return FunctionFragment(
        name=entry.name,
        params=params,
        signature=signature,
        selector=function_signature_to_4byte_selector(signature),
    )


def event_fragment(entry: AbiEvent) -> EventFragment:
    params = _make_params(entry.inputs, allow_indexed=True)
    signature = _signature(entry.name, params)
    return EventFragment(
        name=entry.name,
        params=params,
        signature=signature,
        topic=event_signature_to_log_topic(signature),
        anonymous=entry.anonymous,
    )


# ---- Loading ----


def _load_entries(source: AbiSource) -> list[Any]:
    if isinstance(source, Path):
        try:
            source = source.read_text()
        except OSError as e:
            raise AbiNotFoundError(f"cannot read ABI file {source}: {e}") from e
    if isinstance(source, (str, bytes)):
        try:
            source = json.loads(source)
        except ValueError as e:
            raise MalformedAbiError(f"ABI is not valid JSON: {e}") from e
    # compiler artifacts wrap the entry list under "abi"
    if isinstance(source, Mapping):
        source = source.get("abi")
    if isinstance(source, (str, bytes)) or not isinstance(source, Iterable):
        raise MalformedAbiError("ABI must be a list of entries")
    entries = list(source)
    if not all(isinstance(entry, Mapping) for entry in entries):
        raise MalformedAbiError("ABI entries must be objects")
    return entries


def parse_abi(source: AbiSource) -> ContractSchema:
    """Parse an ABI into a ContractSchema, keeping declaration order."""
    functions: list[FunctionFragment] = []
    events: list[EventFragment] = []
    for entry in _load_entries(source):
        kind = entry.get("type", "function")
        try:
            if kind == "function":
                functions.append(function_fragment(AbiFunction.model_validate(entry)))
            elif kind == "event":
                events.append(event_fragment(AbiEvent.model_validate(entry)))
        except ValidationError as e:
            raise MalformedAbiError(f"invalid {kind} entry {entry.get('name')!r}: {e}") from e
    return ContractSchema(functions=tuple(functions), events=tuple(events))
