from __future__ import annotations

import sys
from typing import TYPE_CHECKING, List, Optional, Tuple

from rich.markup import escape

from .console import console

if TYPE_CHECKING:
    from statesetter.config import StateSetterConfig
    from statesetter.layout import LayoutIndex


def load_config(local_config_path: Optional[str]) -> StateSetterConfig:
    from statesetter.config import StateSetterConfig

    config = StateSetterConfig(local_config_path=local_config_path)
    config.load_configs()
    return config


def load_layout(
    config: StateSetterConfig, contract: str, layout_file: Optional[str]
) -> LayoutIndex:
    from statesetter.layout import load_storage_layout, load_storage_layout_file

    if layout_file is not None:
        return load_storage_layout_file(layout_file)
    return load_storage_layout(
        contract,
        artifacts_path=config.layouts.artifacts_path,
        storage_layouts_path=config.layouts.storage_layouts_path,
    )


def split_target(target: str) -> Tuple[str, List[str]]:
    from statesetter.storage import parse_path

    try:
        segments = parse_path(target)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    if len(segments) == 0:
        console.print("[red]Storage variable name must be specified[/red]")
        sys.exit(1)
    return segments[0], segments[1:]


def abort(error: Exception) -> None:
    console.print(f"[red]{error.__class__.__name__}: {escape(str(error))}[/red]")
    sys.exit(1)
