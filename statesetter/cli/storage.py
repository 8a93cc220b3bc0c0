from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import rich_click as click
from click import Context
from rich.markup import escape

from .common import abort, load_config, load_layout, split_target
from .console import console

if TYPE_CHECKING:
    from statesetter.config import StateSetterConfig
    from statesetter.storage import ResolvedCell


def _print_cell(cell: ResolvedCell) -> None:
    console.print(f"Slot:   {cell.slot_hex} ({cell.slot})")
    console.print(f"Offset: {cell.offset}")
    console.print(f"Width:  {cell.width}")
    console.print(f"Type:   {escape(cell.type_info.label)} ({escape(cell.type_id)})")


layout_option = click.option(
    "--layout",
    "layout_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Storage layout JSON file. Skips the search in artifacts.",
)
uri_option = click.option(
    "--uri",
    type=str,
    default=None,
    help="JSON-RPC URI of the development chain. Overrides the config.",
)


@click.command(name="locate")
@click.argument("contract", nargs=1)
@click.argument("target", nargs=1)
@layout_option
@click.pass_context
def run_locate(
    ctx: Context, contract: str, target: str, layout_file: Optional[str]
) -> None:
    """Print the storage slot, offset and width of TARGET (e.g. `balances[0xab..].amount`)."""
    from statesetter.exceptions import StateSetterError
    from statesetter.storage import resolve

    config: StateSetterConfig = load_config(ctx.obj.get("local_config_path", None))
    var_name, path = split_target(target)

    try:
        layout = load_layout(config, contract, layout_file)
        cell = resolve(
            layout, var_name, path, max_depth=config.resolver.max_path_depth
        )
    except StateSetterError as e:
        abort(e)
        return

    _print_cell(cell)


@click.command(name="get")
@click.argument("contract", nargs=1)
@click.argument("address", nargs=1)
@click.argument("target", nargs=1)
@layout_option
@uri_option
@click.option("--raw", is_flag=True, help="Print the whole storage word as well.")
@click.pass_context
def run_get(
    ctx: Context,
    contract: str,
    address: str,
    target: str,
    layout_file: Optional[str],
    uri: Optional[str],
    raw: bool,
) -> None:
    """Read the value of TARGET from a deployed CONTRACT at ADDRESS."""
    from statesetter.backend import JsonRpcStorageBackend
    from statesetter.exceptions import StateSetterError
    from statesetter.json_rpc import JsonRpcCommunicator
    from statesetter.storage import StateSetter

    config: StateSetterConfig = load_config(ctx.obj.get("local_config_path", None))
    var_name, path = split_target(target)

    try:
        layout = load_layout(config, contract, layout_file)
        with JsonRpcCommunicator(config, uri) as communicator:
            setter = StateSetter(
                layout,
                JsonRpcStorageBackend.from_config(config, communicator),
                address,
                max_depth=config.resolver.max_path_depth,
            )
            cell = setter.locate(var_name, path)
            value = setter.get_state(var_name, path)
            word = setter.get_storage_word(cell.slot) if raw else None
    except (StateSetterError, ConnectionError) as e:
        abort(e)
        return

    if isinstance(value, bytes):
        console.print("0x" + value.hex())
    else:
        console.print(escape(str(value)))
    if word is not None:
        console.print(f"Slot {cell.slot_hex}: 0x{word.hex()}")


@click.command(name="set")
@click.argument("contract", nargs=1)
@click.argument("address", nargs=1)
@click.argument("target", nargs=1)
@click.argument("value", nargs=1)
@layout_option
@uri_option
@click.pass_context
def run_set(
    ctx: Context,
    contract: str,
    address: str,
    target: str,
    value: str,
    layout_file: Optional[str],
    uri: Optional[str],
) -> None:
    """Overwrite TARGET of a deployed CONTRACT at ADDRESS with VALUE."""
    from statesetter.backend import JsonRpcStorageBackend
    from statesetter.exceptions import StateSetterError
    from statesetter.json_rpc import JsonRpcCommunicator
    from statesetter.storage import StateSetter

    config: StateSetterConfig = load_config(ctx.obj.get("local_config_path", None))
    var_name, path = split_target(target)

    try:
        layout = load_layout(config, contract, layout_file)
        with JsonRpcCommunicator(config, uri) as communicator:
            setter = StateSetter(
                layout,
                JsonRpcStorageBackend.from_config(config, communicator),
                address,
                max_depth=config.resolver.max_path_depth,
            )
            cell = setter.set_state(var_name, value, path)
    except (StateSetterError, ConnectionError) as e:
        abort(e)
        return

    console.print(f"[green]Set {escape(target)} of {contract} at {address}[/green]")
    _print_cell(cell)
