from __future__ import annotations

import json
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from statesetter.core import get_logger
from statesetter.exceptions import LayoutNotFoundError

from .index import LayoutIndex

logger = get_logger(__name__)

_REMEDIATION = """To resolve this issue:
1. Make sure the compiler output selection includes `storageLayout`:
   outputSelection: {"*": {"*": ["storageLayout"]}}
2. Recompile the contracts so that artifacts contain the storage layout.
3. Run `statesetter layout extract` to extract storage layouts of all contracts."""


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except JSONDecodeError as e:
        raise LayoutNotFoundError(f"File {path} is not valid JSON: {e}") from e


def _iter_build_info_layouts(
    build_info_path: Path,
) -> Iterator[Tuple[str, str, Dict[str, Any]]]:
    build_info = _read_json(build_info_path)
    contracts = (build_info.get("output") or {}).get("contracts") or {}
    for source_name, source_contracts in contracts.items():
        for contract_name, contract_info in source_contracts.items():
            layout = contract_info.get("storageLayout")
            if layout is not None:
                yield source_name, contract_name, layout


def _find_in_build_info(
    build_info_path: Path, contract_name: str
) -> Optional[Dict[str, Any]]:
    for _, name, layout in _iter_build_info_layouts(build_info_path):
        if name == contract_name:
            return layout
    return None


def _layout_from_artifact(artifact: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if "storageLayout" in artifact:
        return artifact["storageLayout"]
    if "storage" in artifact and "types" in artifact:
        # bare layout file
        return artifact
    return None


def _find_storage_layout(
    contract_name: str,
    artifacts_path: Optional[Path],
    storage_layouts_path: Optional[Path],
) -> Optional[Dict[str, Any]]:
    if storage_layouts_path is not None:
        layout_path = storage_layouts_path / f"{contract_name}.json"
        if layout_path.is_file():
            logger.debug(f"Loading storage layout of {contract_name} from {layout_path}")
            return _read_json(layout_path)

    if artifacts_path is None:
        return None

    artifact_path = artifacts_path / f"{contract_name}.json"
    if artifact_path.is_file():
        layout = _layout_from_artifact(_read_json(artifact_path))
        if layout is not None:
            logger.debug(f"Loading storage layout of {contract_name} from {artifact_path}")
            return layout

    # hardhat artifacts/contracts/<Name>.sol/<Name>.json
    artifact_path = (
        artifacts_path / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"
    )
    if artifact_path.is_file():
        artifact = _read_json(artifact_path)
        layout = _layout_from_artifact(artifact)
        if layout is not None:
            return layout

        build_info_ref = artifact.get("buildInfo")
        dbg_path = artifact_path.with_name(f"{contract_name}.dbg.json")
        if build_info_ref is None and dbg_path.is_file():
            build_info_ref = _read_json(dbg_path).get("buildInfo")
        if build_info_ref is not None:
            build_info_path = (artifact_path.parent / build_info_ref).resolve()
            if not build_info_path.is_file():
                build_info_path = (
                    artifacts_path / "build-info" / Path(build_info_ref).name
                )
            if not build_info_path.suffix:
                build_info_path = build_info_path.with_suffix(".json")
            if build_info_path.is_file():
                layout = _find_in_build_info(build_info_path, contract_name)
                if layout is not None:
                    logger.debug(
                        f"Loading storage layout of {contract_name} from {build_info_path}"
                    )
                    return layout

    build_info_dir = artifacts_path / "build-info"
    if build_info_dir.is_dir():
        for build_info_path in sorted(build_info_dir.glob("*.json")):
            layout = _find_in_build_info(build_info_path, contract_name)
            if layout is not None:
                logger.debug(
                    f"Loading storage layout of {contract_name} from {build_info_path}"
                )
                return layout

    return None


def load_storage_layout(
    contract_name: str,
    *,
    artifacts_path: Optional[Union[str, Path]] = None,
    storage_layouts_path: Optional[Union[str, Path]] = None,
) -> LayoutIndex:
    """
    Find the storage layout of a contract and build its index.

    The following locations are searched in order:

    1. `<storage_layouts_path>/<contract_name>.json`,
    2. `<artifacts_path>/<contract_name>.json` containing `storageLayout`,
    3. `<artifacts_path>/contracts/<contract_name>.sol/<contract_name>.json`, either directly or through the `buildInfo` reference in the artifact or its `.dbg.json` file,
    4. all `<artifacts_path>/build-info/*.json` files.
    """
    layout = _find_storage_layout(
        contract_name,
        Path(artifacts_path) if artifacts_path is not None else None,
        Path(storage_layouts_path) if storage_layouts_path is not None else None,
    )
    if layout is None:
        raise LayoutNotFoundError(
            f"Storage layout not found for '{contract_name}'.\n{_REMEDIATION}"
        )
    return LayoutIndex.from_dict(layout)


def load_storage_layout_file(path: Union[str, Path]) -> LayoutIndex:
    """
    Load a storage layout from a JSON file holding either a bare `storageLayout` object or an artifact containing it.
    """
    path = Path(path)
    if not path.is_file():
        raise LayoutNotFoundError(f"Storage layout file {path} does not exist")
    layout = _layout_from_artifact(_read_json(path))
    if layout is None:
        raise LayoutNotFoundError(f"File {path} does not contain a storage layout")
    return LayoutIndex.from_dict(layout)


def extract_storage_layouts(
    artifacts_path: Union[str, Path], output_path: Union[str, Path]
) -> int:
    """
    Write `<output_path>/<Contract>.json` for every contract with a storage layout found in `<artifacts_path>/build-info`.

    Returns:
        Number of extracted storage layouts.
    """
    build_info_dir = Path(artifacts_path) / "build-info"
    if not build_info_dir.is_dir():
        raise LayoutNotFoundError(f"Build info directory {build_info_dir} does not exist")

    output_path = Path(output_path)
    output_path.mkdir(parents=True, exist_ok=True)

    extracted = set()
    for build_info_path in sorted(build_info_dir.glob("*.json")):
        for source_name, contract_name, layout in _iter_build_info_layouts(
            build_info_path
        ):
            if contract_name in extracted:
                logger.warning(
                    f"Skipping {source_name}:{contract_name}, storage layout of a contract with the same name already extracted"
                )
                continue
            (output_path / f"{contract_name}.json").write_text(
                json.dumps(layout, indent=2)
            )
            extracted.add(contract_name)
            logger.info(f"Extracted storage layout of {source_name}:{contract_name}")

    return len(extracted)
