"""Log decoder used to evaluate event match predicates.

This module translates a raw `Log` into a `DecodedLog` for one
`EventFragment`. A log that does not structurally fit the fragment (topic
count, topic 0, undecodable data) yields None so the caller can move on to
the next candidate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from txquery.abi.schema import EventFragment
from txquery.core.models import Log

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DecodedLog:
    """Decoded event arguments keyed by parameter name."""

    name: str
    signature: str
    topic: bytes
    args: dict[str, Any]

    @property
    def topic_hex(self) -> str:
        return "0x" + self.topic.hex()


def _topics_fit(log: Log, fragment: EventFragment) -> bool:
    if len(log.topics) != fragment.topic_count:
        return False
    return fragment.anonymous or log.topics[0] == fragment.topic


def decode_log(log: Log, fragment: EventFragment) -> DecodedLog | None:
    """Decode `log` against `fragment`, or return None when it does not fit.

    Indexed reference values (bytes, string, arrays, tuples) are only present
    as their keccak hash, so they are returned as the raw topic word.
    """
    if not _topics_fit(log, fragment):
        return None

    first_topic = 0 if fragment.anonymous else 1
    args: dict[str, Any] = {}
    try:
        for i, p in enumerate(fragment.indexed_params):
            topic = log.topics[first_topic + i]
            args[p.name] = abi_decode([p.type], topic)[0] if p.is_value_type else topic

        data_params = fragment.data_params
        values = abi_decode([p.type for p in data_params], log.data) if data_params else ()
    except DecodingError as e:
        logger.debug("log %d does not decode as %s: %s", log.log_index, fragment.signature, e)
        return None

    for p, v in zip(data_params, values):
        args[p.name] = v

    # keep declaration order for callers iterating args
    ordered = {p.name: args[p.name] for p in fragment.params}
    return DecodedLog(
        name=fragment.name,
        signature=fragment.signature,
        topic=fragment.topic,
        args=ordered,
    )
