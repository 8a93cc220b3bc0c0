import logging
import sys
from pathlib import Path
from typing import Optional

import rich_click as click
from click.core import Context
from rich.logging import RichHandler

from .console import console
from .layout import run_layout
from .storage import run_get, run_locate, run_set


def excepthook(type, value, traceback):
    from rich.console import Console
    from rich.traceback import Traceback

    traceback_console = Console(stderr=True)
    traceback_console.print(
        Traceback.from_exception(
            type,
            value,
            traceback,
            suppress=[click],
        )
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    default=False,
    help="Set logging level to debug.",
)
@click.option(
    "--silent",
    "-s",
    is_flag=True,
    default=False,
    help="Disable all stdout output.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(exists=False, dir_okay=False),
    envvar="STATESETTER_CONFIG",
    help="Path to the local config file.",
)
@click.version_option(message="%(version)s", package_name="evm-state-setter")
@click.pass_context
def main(ctx: Context, debug: bool, silent: bool, config: Optional[str]) -> None:
    logging.basicConfig(
        format="%(asctime)s %(name)s: %(message)s",
        handlers=[RichHandler(show_time=False, console=console, markup=True)],
        force=True,  # pyright: ignore reportGeneralTypeIssues
    )
    sys.excepthook = excepthook

    if debug:
        from statesetter.core.logging import set_debug

        set_debug(True)

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["local_config_path"] = config

    if config is not None:
        try:
            Path(config).resolve().relative_to(Path.cwd())
        except ValueError:
            console.print(
                f"[red]Config path must be relative to current directory: {Path.cwd()}[/red]"
            )
            sys.exit(1)

    if silent:
        console.quiet = True


main.add_command(run_get)
main.add_command(run_layout)
main.add_command(run_locate)
main.add_command(run_set)


@main.command(name="config")
@click.pass_context
def config(ctx: Context) -> None:
    """Print loaded config options in JSON format."""
    from statesetter.config import StateSetterConfig

    config = StateSetterConfig(local_config_path=ctx.obj.get("local_config_path", None))
    config.load_configs()
    console.print_json(str(config))


if __name__ == "__main__":
    main()
