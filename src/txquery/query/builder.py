"""Query builder: declare semantic fields, receive canonical buffer offsets.

A `QueryBuilder` is bound to one (transaction, receipt) pair and owns:
- the ordered list of declarations (each resolved to zero or more fields)
- a per-address cache of ABI lookups (one fetch per distinct address)
- the injected ABI provider capability

Static declarations resolve immediately; function and event declarations
suspend while the ABI of the contract involved is fetched. Each declaration
reserves its output slot when it starts, so `build()` returns fields in
declaration order even if declarations are awaited concurrently. The builder
itself is not safe for overlapping use by unrelated callers.

Example
-------
>>> builder = QueryBuilder(tx, receipt, abi_provider)
>>> builder.add_static_field(QueryableField.RX_STATUS).add_static_field("sender")
>>> await builder.event_builder("Transfer", lambda log, ev, i: True,
...                             lambda b: b.add_signature().add_argument("value"))
>>> builder.add_function_signature()
>>> await builder.add_function_argument("burn", "value")
>>> fields = builder.build()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Union

from txquery.abi.schema import ContractSchema, EventFragment, FunctionFragment, parse_abi
from txquery.constants import SELECTOR_SIZE, WORD_SIZE
from txquery.core.config import QueryConfig
from txquery.core.errors import (
    AbiMismatchError,
    AbiNotFoundError,
    IncompleteDeclarationError,
    NoMatchingLogError,
    QueryError,
    UnknownFunctionError,
)
from txquery.core.interfaces import AbiFetcher, IAbiProvider
from txquery.core.models import FieldDescriptor, Log, Receipt, Transaction
from txquery.decoding.decoder import DecodedLog, decode_log
from txquery.encoding.layout import LogLayout, QueryableField, compute_layout, queryable_field
from txquery.resolver.offsets import resolve_event_argument, resolve_function_argument

logger = logging.getLogger(__name__)

LogPredicate = Callable[[Log, DecodedLog, int], Union[bool, Awaitable[bool]]]
Describe = Callable[["EventFieldBuilder"], Any]


@dataclass(slots=True)
class _Declaration:
    label: str
    fields: list[FieldDescriptor] | None = None
    error: Exception | None = None

    @property
    def pending(self) -> bool:
        return self.fields is None and self.error is None


@dataclass(frozen=True, slots=True)
class BoundLog:
    """The log an event declaration matched, with its decoding and position."""

    index: int
    log: Log
    fragment: EventFragment
    decoded: DecodedLog
    layout: LogLayout


class EventFieldBuilder:
    """Scoped builder declaring fields of one bound log."""

    def __init__(self, bound: BoundLog) -> None:
        self.bound = bound
        self._fields: list[FieldDescriptor] = []

    @property
    def fields(self) -> list[FieldDescriptor]:
        return list(self._fields)

    def add_address(self) -> EventFieldBuilder:
        """Declare the emitting address word."""
        self._fields.append(FieldDescriptor(self.bound.layout.address_offset, WORD_SIZE))
        return self

    def add_signature(self) -> EventFieldBuilder:
        """Declare topic 0, the event signature hash."""
        if self.bound.fragment.anonymous:
            raise AbiMismatchError(f"anonymous event {self.bound.fragment.signature} has no signature topic")
        self._fields.append(FieldDescriptor(self.bound.layout.topic_offset(0), WORD_SIZE))
        return self

    def add_argument(self, arg_name: str, *, include_length: bool = False) -> EventFieldBuilder:
        """Declare an event argument (topic word if indexed, data slot otherwise)."""
        self._fields.append(
            resolve_event_argument(
                self.bound.fragment,
                arg_name,
                self.bound.log,
                self.bound.layout,
                include_length=include_length,
            )
        )
        return self


def _as_fetcher(provider: IAbiProvider | AbiFetcher | None) -> AbiFetcher | None:
    if provider is None:
        return None
    if isinstance(provider, IAbiProvider):
        return provider.fetch
    if callable(provider):
        return provider
    raise TypeError(f"ABI provider must be an IAbiProvider or async callable, got {type(provider).__name__}")


class QueryBuilder:
    """Accumulates field declarations for one (transaction, receipt) pair."""

    def __init__(
        self,
        transaction: Transaction,
        receipt: Receipt,
        abi_provider: IAbiProvider | AbiFetcher | None = None,
        *,
        config: QueryConfig | None = None,
    ) -> None:
        self.transaction = transaction
        self.receipt = receipt
        self.config = config or QueryConfig()
        self.layout = compute_layout(transaction, receipt)
        self._fetch = _as_fetcher(abi_provider)
        self._declarations: list[_Declaration] = []
        self._abi_cache: dict[str, asyncio.Future[ContractSchema]] = {}

    @classmethod
    def from_transaction(
        cls,
        transaction: Transaction,
        receipt: Receipt,
        *,
        config: QueryConfig | None = None,
    ) -> QueryBuilder:
        return cls(transaction, receipt, config=config)

    def set_abi_provider(self, provider: IAbiProvider | AbiFetcher) -> QueryBuilder:
        """Install the ABI provider; already cached schemas are kept."""
        self._fetch = _as_fetcher(provider)
        return self

    # ---------- declaration bookkeeping ----------

    @contextmanager
    def _declare(self, label: str) -> Iterator[_Declaration]:
        decl = _Declaration(label)
        self._declarations.append(decl)
        try:
            yield decl
        except Exception as e:
            decl.error = e
            if isinstance(e, QueryError) and e.declaration is None:
                e.declaration = label
            raise

    def discard_failed(self) -> list[Exception]:
        """Drop failed declarations so `build()` can proceed; return their errors."""
        errors = [d.error for d in self._declarations if d.error is not None]
        self._declarations = [d for d in self._declarations if d.error is None]
        return errors

    # ---------- ABI lookup ----------

    async def _load_schema(self, address: str) -> ContractSchema:
        if self._fetch is None:
            raise AbiNotFoundError(f"no ABI provider configured to look up {address}")
        logger.debug("fetching ABI for %s", address)
        try:
            source = await self._fetch(address)
        except QueryError:
            raise
        except Exception as e:
            raise AbiNotFoundError(f"ABI lookup for {address} failed: {e}") from e
        if source is None:
            raise AbiNotFoundError(f"no ABI available for {address}")
        return parse_abi(source)

    async def _schema_for(self, address: str) -> ContractSchema:
        """Return the parsed schema of `address`, fetching it at most once."""
        key = address.lower()
        task = self._abi_cache.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load_schema(address))
            self._abi_cache[key] = task
        else:
            logger.debug("ABI cache hit for %s", address)
        try:
            return await task
        except QueryError:
            # forget failures so a later declaration may retry the lookup
            if self._abi_cache.get(key) is task:
                del self._abi_cache[key]
            raise

    # ---------- static declarations ----------

    def add_static_field(self, name: QueryableField | str) -> QueryBuilder:
        """Declare a header slot (status, sender, recipient, ...).

        An unknown name raises ValueError before anything is declared.
        """
        f = queryable_field(name)
        with self._declare(f"static {f.name}") as decl:
            decl.fields = [FieldDescriptor(f.offset, WORD_SIZE)]
        return self

    def add_function_signature(self) -> QueryBuilder:
        """Declare the 4-byte selector at the start of the call region."""
        with self._declare("function signature") as decl:
            if self.transaction.selector is None:
                raise AbiMismatchError(
                    f"call data of {len(self.transaction.data)} bytes carries no function selector"
                )
            decl.fields = [FieldDescriptor(self.layout.call_base, SELECTOR_SIZE)]
        return self

    # ---------- function declarations ----------

    def _select_function(self, schema: ContractSchema, function_name: str) -> FunctionFragment:
        candidates = schema.functions_named(function_name)
        if not candidates:
            raise UnknownFunctionError(f"recipient ABI has no function {function_name!r}")
        selector = self.transaction.selector
        for fragment in candidates:
            if fragment.selector == selector:
                return fragment
        if self.config.verify_selector:
            actual = "0x" + selector.hex() if selector else "<none>"
            expected = ", ".join(f"{f.signature}=0x{f.selector.hex()}" for f in candidates)
            raise AbiMismatchError(f"call data selector {actual} does not match {expected}")
        return candidates[0]

    async def add_function_argument(
        self,
        function_name: str,
        arg_name: str,
        *,
        include_length: bool = False,
    ) -> QueryBuilder:
        """Declare one argument of the called function, looked up in the recipient's ABI."""
        with self._declare(f"function {function_name}.{arg_name}") as decl:
            recipient = self.transaction.recipient
            if recipient is None:
                raise AbiNotFoundError("contract creation has no recipient ABI")
            schema = await self._schema_for(recipient)
            fragment = self._select_function(schema, function_name)
            decl.fields = [
                resolve_function_argument(
                    fragment,
                    arg_name,
                    self.transaction.data,
                    call_base=self.layout.call_base,
                    include_length=include_length,
                )
            ]
        return self

    # ---------- event declarations ----------

    async def _bind_log(self, event_name: str, match: LogPredicate) -> BoundLog | None:
        """Return the first log (receipt order) that decodes as `event_name` and matches."""
        # emitters whose lookup failed in this scan; retried by later declarations only
        unknown: set[str] = set()
        for index, log in enumerate(self.receipt.logs):
            emitter = log.address.lower()
            if emitter in unknown:
                logger.debug("skipping log %d: no ABI for emitter %s", index, log.address)
                continue
            try:
                schema = await self._schema_for(log.address)
            except AbiNotFoundError:
                if not self.config.skip_unknown_emitters:
                    raise
                unknown.add(emitter)
                logger.debug("skipping log %d: no ABI for emitter %s", index, log.address)
                continue

            for fragment in schema.events_named(event_name):
                decoded = decode_log(log, fragment)
                if decoded is None:
                    continue
                verdict = match(log, decoded, index)
                if inspect.isawaitable(verdict):
                    verdict = await verdict
                if verdict:
                    logger.debug("event %s bound to log %d (%s)", event_name, index, log.address)
                    return BoundLog(
                        index=index,
                        log=log,
                        fragment=fragment,
                        decoded=decoded,
                        layout=self.layout.logs[index],
                    )
        return None

    async def event_builder(
        self,
        event_name: str,
        match: LogPredicate,
        describe: Describe,
    ) -> QueryBuilder:
        """Bind the first matching `event_name` log and declare its fields via `describe`."""
        with self._declare(f"event {event_name}") as decl:
            bound = await self._bind_log(event_name, match)
            if bound is None:
                if self.config.missing_log_policy == "fail":
                    raise NoMatchingLogError(
                        f"none of {len(self.receipt.logs)} logs matched event {event_name!r}"
                    )
                logger.warning("no log matched event %r; declaration left empty", event_name)
                decl.fields = []
                return self

            sub = EventFieldBuilder(bound)
            result = describe(sub)
            if inspect.isawaitable(result):
                await result
            decl.fields = sub.fields
        return self

    # ---------- output ----------

    def build(self) -> list[FieldDescriptor]:
        """Return resolved fields in declaration order."""
        pending = [d.label for d in self._declarations if d.pending]
        failed = [d.label for d in self._declarations if d.error is not None]
        if pending or failed:
            parts = []
            if pending:
                parts.append(f"pending: {', '.join(pending)}")
            if failed:
                parts.append(f"failed: {', '.join(failed)}")
            raise IncompleteDeclarationError("cannot build query (" + "; ".join(parts) + ")")
        return [f for d in self._declarations for f in d.fields or ()]
