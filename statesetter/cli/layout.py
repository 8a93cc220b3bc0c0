from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import rich_click as click
from click import Context
from rich.markup import escape

from .common import abort, load_config, load_layout
from .console import console

if TYPE_CHECKING:
    from statesetter.config import StateSetterConfig


@click.group(name="layout")
@click.pass_context
def run_layout(ctx: Context) -> None:
    """Inspect and extract contract storage layouts."""
    config = load_config(ctx.obj.get("local_config_path", None))
    ctx.obj["config"] = config


@run_layout.command(name="print")
@click.argument("contract", nargs=1)
@click.option(
    "--layout",
    "layout_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Storage layout JSON file. Skips the search in artifacts.",
)
@click.option(
    "--split-slots", is_flag=True, help="Split different slots by a horizontal line"
)
@click.option("--table-style", type=str, default="", help="Style for the table.")
@click.option(
    "--header-style", type=str, default="", help="Style for the table header."
)
@click.option("--style", type=str, default="cyan", help="Style for the table cells.")
@click.pass_context
def layout_print(
    ctx: Context,
    contract: str,
    layout_file: Optional[str],
    split_slots: bool,
    table_style: str,
    header_style: str,
    style: str,
) -> None:
    """Print storage layout of CONTRACT."""
    from rich.table import Table

    from statesetter.exceptions import StateSetterError

    config: StateSetterConfig = ctx.obj["config"]
    try:
        layout = load_layout(config, contract, layout_file)
    except StateSetterError as e:
        abort(e)
        return

    table = Table(title=f"{contract} storage layout", style=table_style)
    table.add_column("Slot", header_style=header_style)
    table.add_column("Offset", header_style=header_style)
    table.add_column("Name", header_style=header_style)
    table.add_column("Type", header_style=header_style)
    table.add_column("Contract", header_style=header_style)

    last_slot = -1
    for var in sorted(layout.variables, key=lambda v: (v.slot, v.offset)):
        if var.slot != last_slot:
            if split_slots:
                table.add_section()
            slot = str(var.slot)
        else:
            slot = ""

        type_info = layout.types.get(var.type)
        table.add_row(
            slot,
            str(var.offset),
            escape(var.label),
            escape(type_info.label if type_info is not None else var.type),
            escape(var.contract or ""),
            style=style,
        )
        last_slot = var.slot

    console.print(table)


@run_layout.command(name="extract")
@click.option(
    "--artifacts",
    "artifacts_path",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory with compilation artifacts. Defaults to the config value.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to write storage layouts into. Defaults to the config value.",
)
@click.pass_context
def layout_extract(
    ctx: Context, artifacts_path: Optional[str], output_path: Optional[str]
) -> None:
    """Extract storage layouts of all contracts from build info files."""
    from statesetter.exceptions import StateSetterError
    from statesetter.layout import extract_storage_layouts

    config: StateSetterConfig = ctx.obj["config"]
    artifacts = (
        artifacts_path if artifacts_path is not None else config.layouts.artifacts_path
    )
    output = (
        output_path
        if output_path is not None
        else config.layouts.storage_layouts_path
    )

    try:
        count = extract_storage_layouts(artifacts, output)
    except StateSetterError as e:
        abort(e)
        return

    console.print(f"[green]Extracted {count} storage layouts into {output}[/green]")
