"""
tdx-wire CLI.

Commands:
- request: Build a request frame and print it as hex
- decode: Parse and decode a captured response frame
- fixture: Check a captured fixture file against the codec
- config: Generate, validate or dump configuration
"""

import datetime
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..codec.facade import TdxCodec
from ..config import TdxConfig, generate_default_config, load_config
from ..core.errors import TdxError, UnknownMessageType
from ..formats.frame import parse_request
from ..formats.message_types import Exchange, KlineType, MessageType
from ..messages.records import ListResponse, record_to_dict
from ..messages.registry import codec_for
from ..testing.fixtures import FixtureRecord, decode_hex


app = typer.Typer(
    name="tdx-wire",
    help="TDX market-data wire protocol codec",
    add_completion=False,
)
console = Console()

EXIT_CODEC_ERROR = 1
EXIT_UNKNOWN_TYPE = 2


def _kline_type(value: str) -> KlineType:
    try:
        if value.isdigit():
            return KlineType(int(value))
        return KlineType[value.strip().upper().replace('-', '_')]
    except (KeyError, ValueError):
        names = ', '.join(k.name.lower() for k in KlineType)
        console.print(f"[red]Unknown kline type:[/] {value} (one of: {names})")
        raise typer.Exit(EXIT_CODEC_ERROR)


def _exchange(value: str) -> Exchange:
    exchange = Exchange.from_prefix(value)
    if exchange is None:
        console.print(f"[red]Unknown exchange:[/] {value} (sz, sh, bj)")
        raise typer.Exit(EXIT_CODEC_ERROR)
    return exchange


def _parse_date(value: Optional[str]) -> Optional[datetime.date]:
    if value is None:
        return None
    try:
        return datetime.datetime.strptime(value, '%Y%m%d').date()
    except ValueError:
        console.print(f"[red]Invalid date:[/] {value} (expected YYYYMMDD)")
        raise typer.Exit(EXIT_CODEC_ERROR)


def _hex(data: bytes) -> str:
    return ' '.join(f'{b:02X}' for b in data)


def _print_error(e: TdxError) -> None:
    console.print(f"[red]{e.code.value} {type(e).__name__}:[/] {e.message}")


def _print_header(frame) -> None:
    table = Table(title="Response Header", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Type", f"{MessageType.label(frame.msg_type)} (0x{frame.msg_type:04X})")
    table.add_row("Msg ID", str(frame.msg_id))
    table.add_row("Control", f"0x{frame.control:02X} ({'ok' if frame.is_success else 'error'})")
    table.add_row("Zip Length", str(frame.zip_length))
    table.add_row("Raw Length", str(frame.raw_length))
    table.add_row("Compressed", "yes" if frame.is_compressed else "no")
    console.print(table)


def _print_records(records, limit: int) -> None:
    if records is None:
        console.print("[dim]No records[/]")
        return

    if not isinstance(records, ListResponse):
        console.print(record_to_dict(records))
        return

    rows = [record_to_dict(r) for r in records.items[:limit]]
    table = Table(title=f"Records ({records.count})")
    if rows:
        for column in rows[0]:
            table.add_column(column)
        for row in rows:
            table.add_row(*(str(v) for v in row.values()))
    console.print(table)

    if len(records) > limit:
        console.print(f"[dim]... {len(records) - limit} more (use --limit)[/]")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """TDX market-data wire protocol codec."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    level = logging.DEBUG if verbose else load_config().logging.level_number
    logging.getLogger('tdx_wire').setLevel(level)


# === VERSION COMMAND ===

@app.command()
def version():
    """Show version information."""
    console.print(f"[bold blue]tdx-wire v{__version__}[/]")


# === CONFIG COMMAND ===

@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    if action == "init":
        console.print(generate_default_config())

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        try:
            cfg = TdxConfig.load(path)
        except Exception as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(1)
        errors = cfg.validate()
        if errors:
            console.print("[red]Invalid configuration:[/]")
            for e in errors:
                console.print(f"  - {e}")
            raise typer.Exit(1)
        console.print(f"[green]Valid:[/] {path}")

    elif action == "dump":
        cfg = TdxConfig.load(path) if path else load_config()
        console.print(cfg.to_yaml())

    else:
        console.print(f"[red]Unknown action:[/] {action}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


# === REQUEST COMMAND ===

@app.command()
def request(
    kind: str = typer.Argument(..., help="Message kind, e.g. kline, quote, history-trade"),
    code: Optional[List[str]] = typer.Option(None, "--code", help="Instrument code (repeat for quote)"),
    exchange: str = typer.Option("sz", "--exchange", help="sz, sh or bj (count, code-list)"),
    start: int = typer.Option(0, "--start"),
    count: Optional[int] = typer.Option(None, "--count"),
    date: Optional[str] = typer.Option(None, "--date", help="YYYYMMDD (history kinds)"),
    kline_type: str = typer.Option("day", "--kline-type"),
    msg_id: Optional[int] = typer.Option(None, "--msg-id"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
):
    """Build a request frame and print it as hex."""
    codec = TdxCodec(load_config(config_path))

    try:
        msg_type = MessageType[kind.strip().upper().replace('-', '_')]
    except KeyError:
        console.print(f"[red]Unknown message kind:[/] {kind}")
        raise typer.Exit(EXIT_UNKNOWN_TYPE)

    available = {
        'exchange': lambda: _exchange(exchange),
        'start': lambda: start,
        'count': lambda: count,
        'date': lambda: _parse_date(date),
        'kline_type': lambda: _kline_type(kline_type),
        'codes': lambda: list(code or []),
        'code': lambda: (code or [None])[0],
    }

    params = {}
    for name in codec_for(msg_type).params:
        value = available[name]()
        if value is None and name in ('code', 'date'):
            console.print(f"[red]--{name} is required for {kind}[/]")
            raise typer.Exit(EXIT_CODEC_ERROR)
        if value is not None:
            params[name] = value

    try:
        frame = codec.build_request(msg_type, msg_id=msg_id, **params)
    except TdxError as e:
        _print_error(e)
        raise typer.Exit(EXIT_CODEC_ERROR)

    console.print(_hex(frame))


# === DECODE COMMAND ===

@app.command()
def decode(
    hex_frame: str = typer.Argument(..., help="Response frame as hex (spaces allowed)"),
    kline_type: str = typer.Option("day", "--kline-type"),
    index: bool = typer.Option(False, "--index", help="Kline response is for an index"),
    date: Optional[str] = typer.Option(None, "--date", help="Trading date YYYYMMDD for ticks"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
    skip_unknown: bool = typer.Option(False, "--skip-unknown", help="Accept unknown types"),
    limit: int = typer.Option(20, "--limit", help="Rows to show in table output"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
):
    """Parse and decode a response frame."""
    codec = TdxCodec(load_config(config_path))

    try:
        data = decode_hex(hex_frame)
    except ValueError as e:
        console.print(f"[red]Invalid hex:[/] {e}")
        raise typer.Exit(EXIT_CODEC_ERROR)
    if data is None:
        console.print("[red]Empty frame[/]")
        raise typer.Exit(EXIT_CODEC_ERROR)

    try:
        result = codec.decode_response(
            data,
            on_unknown='skip' if skip_unknown else 'raise',
            kline_type=_kline_type(kline_type),
            is_index=index,
            trade_date=_parse_date(date),
        )
    except UnknownMessageType as e:
        _print_error(e)
        raise typer.Exit(EXIT_UNKNOWN_TYPE)
    except TdxError as e:
        _print_error(e)
        raise typer.Exit(EXIT_CODEC_ERROR)

    if as_json:
        output = {
            'type': MessageType.label(result.frame.msg_type),
            'msg_id': result.frame.msg_id,
            'control': result.frame.control,
            'known': result.known,
            'records': record_to_dict(result.records),
        }
        typer.echo(json.dumps(output, indent=2, ensure_ascii=False))
        return

    _print_header(result.frame)
    _print_records(result.records, limit)


# === FIXTURE COMMAND ===

@app.command()
def fixture(
    path: Path = typer.Argument(..., help="Fixture JSON file", exists=True),
):
    """Check a captured fixture: request parses, response decodes, data matches."""
    record = FixtureRecord.load(path)
    codec = TdxCodec()
    console.print(f"[bold]{record.name}[/] {record.type_name} {record.type_value}")

    try:
        frame = parse_request(record.request_bytes())
        if frame.msg_type != record.msg_type:
            console.print(f"[red]Request type mismatch:[/] 0x{frame.msg_type:04X}")
            raise typer.Exit(EXIT_CODEC_ERROR)
        expected = record.request_data_bytes()
        if expected is not None and frame.payload != expected:
            console.print("[red]Request payload differs from request_data[/]")
            raise typer.Exit(EXIT_CODEC_ERROR)
        console.print(f"  [green]✓[/] request id={frame.msg_id} payload={len(frame.payload)} bytes")

        response = record.response_bytes()
        if response is None:
            console.print("  [yellow]○[/] response elided")
            return

        result = codec.decode_response(response, on_unknown='skip')
        expected = record.response_data_bytes()
        if expected is not None and result.payload != expected:
            console.print("[red]Response payload differs from response_data[/]")
            raise typer.Exit(EXIT_CODEC_ERROR)
        console.print(f"  [green]✓[/] response {len(result.payload)} bytes decoded")
    except TdxError as e:
        _print_error(e)
        raise typer.Exit(EXIT_CODEC_ERROR)


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
