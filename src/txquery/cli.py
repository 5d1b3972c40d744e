import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from txquery.clients.abi import ExplorerAbiProvider, StaticAbiProvider
from txquery.clients.rpc import RPC
from txquery.core.config import FetchConfig
from txquery.core.errors import QueryError
from txquery.core.interfaces import IAbiProvider
from txquery.core.models import Receipt, Transaction
from txquery.encoding.encoder import encode
from txquery.query.builder import EventFieldBuilder, QueryBuilder

console = Console()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """txquery: locate transaction and receipt fields in a canonical buffer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


async def _fetch(config: FetchConfig) -> tuple[Transaction, Receipt]:
    rpc = RPC(config.rpc_url, timeout_s=config.timeout_s)
    try:
        tx = await rpc.get_transaction(config.tx_hash)
        receipt = await rpc.get_transaction_receipt(config.tx_hash)
    finally:
        await rpc.aclose()
    return tx, receipt


def _run(coro):
    try:
        return asyncio.run(coro)
    except (QueryError, LookupError, RuntimeError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@cli.command("encode")
@click.option("--rpc", required=True, help="RPC endpoint URL")
@click.option("--tx", "tx_hash", required=True, help="Transaction hash")
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), help="Write raw buffer bytes to a file")
@click.option("--timeout", "timeout_s", type=int, default=20, show_default=True)
def encode_cmd(rpc: str, tx_hash: str, out: Path | None, timeout_s: int) -> None:
    """Fetch a transaction and its receipt and print the canonical buffer."""
    config = FetchConfig(rpc_url=rpc, tx_hash=tx_hash, timeout_s=timeout_s)
    tx, receipt = _run(_fetch(config))
    buffer = encode(tx, receipt)
    layout = buffer.layout

    table = Table(title=f"canonical buffer • {len(buffer):,} bytes")
    table.add_column("region")
    table.add_column("offset", justify="right")
    table.add_column("size", justify="right")
    table.add_row("header", "0", str(layout.call_base))
    table.add_row("call", str(layout.call_base), str(layout.call_size))
    for i, lg in enumerate(layout.logs):
        table.add_row(f"log {i} ({lg.topic_count} topics)", str(lg.offset), str(lg.end - lg.offset))
    console.print(table)

    if out is not None:
        out.write_bytes(bytes(buffer))
        console.print(f"[bold]written[/]: {out}")
    else:
        console.print(buffer.hex())


def _abi_provider(abis: tuple[str, ...], explorer: str | None, api_key: str | None) -> IAbiProvider | None:
    if explorer:
        return ExplorerAbiProvider(explorer, api_key=api_key)
    if not abis:
        return None
    mapping: dict[str, Path] = {}
    default: Path | None = None
    for spec in abis:
        address, sep, path = spec.partition("=")
        if sep:
            mapping[address] = Path(path)
        else:
            default = Path(spec)
    return StaticAbiProvider(mapping, default=default)


def _describe(args: list[str]):
    def describe(b: EventFieldBuilder) -> None:
        b.add_address().add_signature()
        for name in args:
            b.add_argument(name)

    return describe


@cli.command("query")
@click.option("--rpc", required=True, help="RPC endpoint URL")
@click.option("--tx", "tx_hash", required=True, help="Transaction hash")
@click.option("--abi", "abis", multiple=True, help="ABI file, as ADDRESS=FILE or FILE for any address; repeatable")
@click.option("--explorer", default=None, help="Etherscan-compatible API URL to fetch ABIs from")
@click.option("--api-key", default=None, help="Explorer API key")
@click.option("--static", "statics", multiple=True, help="Header field (status, sender, recipient, TX_VALUE, ...)")
@click.option("--event", "events", multiple=True, help="EVENT or EVENT:arg1,arg2 (first log of that event)")
@click.option("--selector", is_flag=True, help="Include the function selector")
@click.option("--arg", "func_args", multiple=True, help="FUNCTION.ARG call argument; repeatable")
@click.option("--timeout", "timeout_s", type=int, default=20, show_default=True)
def query_cmd(
    rpc: str,
    tx_hash: str,
    abis: tuple[str, ...],
    explorer: str | None,
    api_key: str | None,
    statics: tuple[str, ...],
    events: tuple[str, ...],
    selector: bool,
    func_args: tuple[str, ...],
    timeout_s: int,
) -> None:
    """Resolve field offsets: statics, then events, selector and call arguments."""
    config = FetchConfig(
        rpc_url=rpc,
        tx_hash=tx_hash,
        timeout_s=timeout_s,
        explorer_url=explorer,
        explorer_api_key=api_key,
    )

    async def run():
        tx, receipt = await _fetch(config)
        provider = _abi_provider(abis, config.explorer_url, config.explorer_api_key)
        builder = QueryBuilder(tx, receipt, provider)
        labels: list[str] = []
        try:
            for name in statics:
                builder.add_static_field(name)
                labels.append(name)
            for spec in events:
                event_name, _, arg_list = spec.partition(":")
                args = [a.strip() for a in arg_list.split(",") if a.strip()]
                await builder.event_builder(event_name, lambda *_: True, _describe(args))
                labels += [f"{event_name}.address", f"{event_name}.signature"]
                labels += [f"{event_name}.{a}" for a in args]
            if selector:
                builder.add_function_signature()
                labels.append("selector")
            for spec in func_args:
                function_name, _, arg_name = spec.partition(".")
                await builder.add_function_argument(function_name, arg_name)
                labels.append(spec)
        finally:
            if isinstance(provider, ExplorerAbiProvider):
                await provider.aclose()
        return encode(tx, receipt), labels, builder.build()

    buffer, labels, fields = _run(run())
    reader = buffer.reader()

    table = Table(title=f"{len(fields)} fields")
    table.add_column("#", justify="right")
    table.add_column("field")
    table.add_column("offset", justify="right")
    table.add_column("size", justify="right")
    table.add_column("value")
    for i, (label, field) in enumerate(zip(labels, fields)):
        table.add_row(str(i), label, str(field.offset), str(field.size), "0x" + reader.read_field(field).hex())
    console.print(table)
