"""Offset resolution for head/tail encoded parameter lists.

Given an ordered parameter list whose head starts at absolute offset `base`
and the encoded bytes of that list (`data`, starting at the head), locate
one parameter:

- static parameter: its inline words in the head
- dynamic parameter: follow the pointer stored in its head word (relative to
  the head start) to the tail entry. For `bytes`, `string` and `T[]` the
  entry's first word is a length and the payload follows; dynamic tuples and
  fixed-size arrays of dynamic items have no length word, so the whole entry
  is the payload

Tail entries are assumed to follow the head in parameter order; the stored
pointers are read, never recomputed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from txquery.abi.schema import EventFragment, FunctionFragment, Param
from txquery.constants import SELECTOR_SIZE, WORD_SIZE
from txquery.core.errors import AbiMismatchError
from txquery.core.models import FieldDescriptor, Log
from txquery.decoding.utils import uint_at
from txquery.encoding.layout import CALL_BASE, LogLayout

logger = logging.getLogger(__name__)


def head_offsets(params: Sequence[Param]) -> list[int]:
    """Offset of each parameter's head slot relative to the head start."""
    out: list[int] = []
    pos = 0
    for p in params:
        out.append(pos)
        pos += p.head_size
    return out


def _tail_end(params: Sequence[Param], index: int, heads: list[int], data: bytes) -> int:
    """End of the tail entry of `params[index]`: next dynamic pointer, else end of data."""
    for j in range(index + 1, len(params)):
        if params[j].is_dynamic:
            ptr = uint_at(data, heads[j])
            if ptr is not None and ptr <= len(data):
                return ptr
    return len(data)


def resolve_parameter(
    params: Sequence[Param],
    index: int,
    *,
    data: bytes,
    base: int,
    include_length: bool = False,
) -> FieldDescriptor:
    """Resolve `params[index]` to its absolute `{offset, size}`."""
    heads = head_offsets(params)
    param = params[index]
    head = heads[index]

    if not param.is_dynamic:
        if head + param.head_size > len(data):
            raise AbiMismatchError(
                f"head of {len(data)} bytes too short for parameter {param.name!r} at {head}"
            )
        return FieldDescriptor(base + head, param.head_size)

    pointer = uint_at(data, head)
    if pointer is None:
        raise AbiMismatchError(f"missing pointer word for parameter {param.name!r} at {head}")
    first_word = uint_at(data, pointer)
    if first_word is None:
        raise AbiMismatchError(
            f"pointer {pointer} of parameter {param.name!r} is outside {len(data)} bytes of data"
        )

    if not param.has_length_prefix:
        # dynamic tuples and fixed arrays of dynamic items start with their own head
        end = _tail_end(params, index, heads, data)
        if end <= pointer:
            raise AbiMismatchError(f"tail of parameter {param.name!r} is empty")
        return FieldDescriptor(base + pointer, end - pointer)

    payload_start = pointer + WORD_SIZE
    if param.is_bytes_like:
        payload_size = first_word
    else:
        payload_size = _tail_end(params, index, heads, data) - payload_start
    if payload_size < 0 or payload_start + payload_size > len(data):
        raise AbiMismatchError(f"tail of parameter {param.name!r} runs past the end of data")

    if include_length:
        return FieldDescriptor(base + pointer, WORD_SIZE + payload_size)
    if payload_size == 0:
        logger.debug("parameter %r has an empty payload; resolving to its length word", param.name)
        return FieldDescriptor(base + pointer, WORD_SIZE)
    return FieldDescriptor(base + payload_start, payload_size)


def resolve_function_argument(
    fragment: FunctionFragment,
    arg_name: str,
    call_data: bytes,
    *,
    call_base: int = CALL_BASE,
    include_length: bool = False,
) -> FieldDescriptor:
    """Resolve a call argument; the head starts right after the selector."""
    index = fragment.param_index(arg_name)
    return resolve_parameter(
        fragment.params,
        index,
        data=call_data[SELECTOR_SIZE:],
        base=call_base + SELECTOR_SIZE,
        include_length=include_length,
    )


def _position(params: Sequence[Param], param: Param) -> int:
    return next(i for i, p in enumerate(params) if p is param)


def resolve_event_argument(
    fragment: EventFragment,
    arg_name: str,
    log: Log,
    layout: LogLayout,
    *,
    include_length: bool = False,
) -> FieldDescriptor:
    """Resolve an event argument to its topic word or its slot in the log data.

    Indexed and non-indexed parameters are numbered separately: an indexed
    parameter's topic index counts only earlier indexed parameters (plus the
    signature topic), a data parameter's head slot only earlier data ones.
    """
    param = fragment.param(arg_name)
    if param.indexed:
        topic_index = _position(fragment.indexed_params, param) + (0 if fragment.anonymous else 1)
        return FieldDescriptor(layout.topic_offset(topic_index), WORD_SIZE)

    data_params = fragment.data_params
    return resolve_parameter(
        data_params,
        _position(data_params, param),
        data=log.data,
        base=layout.data_offset,
        include_length=include_length,
    )
