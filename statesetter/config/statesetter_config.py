import os
import platform
import reprlib
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Set, Union

import networkx as nx
import tomli

from statesetter.core import get_logger
from statesetter.utils import change_cwd

from .data_model import (
    BackendConfig,
    GeneralConfig,
    LayoutsConfig,
    ResolverConfig,
    TopLevelConfig,
)

logger = get_logger(__name__)

CONFIG_DIR_NAME = "statesetter"
LOCAL_CONFIG_FILE_NAME = "statesetter.toml"


class UnsupportedPlatformError(Exception):
    """
    The global config directory cannot be determined on this platform. Supported platforms are: Linux, macOS, Windows.
    """


def _default_global_config_path() -> Path:
    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / CONFIG_DIR_NAME / "config.toml"

    system = platform.system()
    if system in {"Linux", "Darwin"}:
        return Path.home() / ".config" / CONFIG_DIR_NAME / "config.toml"
    elif system == "Windows":
        return Path(os.environ["LOCALAPPDATA"]) / CONFIG_DIR_NAME / "config.toml"
    raise UnsupportedPlatformError(f"Platform `{system}` is not supported.")


def _merge_into(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_into(target[key], value)
        else:
            target[key] = value


def _describe_cycles(graph: nx.DiGraph) -> str:
    lines = ["Found cyclic config subconfigs:"]
    for no, cycle in enumerate(nx.simple_cycles(graph)):
        lines.append(f"Cycle {no}:")
        lines.extend(str(cycle_path) for cycle_path in cycle)
    return "\n".join(lines)


class StateSetterConfig:
    """
    Options merged from the global `config.toml`, the project `statesetter.toml` and any files pulled in through
    the `subconfigs` key. Files loaded later override earlier ones key by key.
    Relative paths are resolved against the directory of the file they appear in.
    """

    _project_root_path: Path
    _local_config_path: Path
    _global_config_path: Path
    _loaded_files: Set[Path]
    _raw: Dict[str, Any]
    _config: TopLevelConfig

    def __init__(
        self,
        *_,
        local_config_path: Optional[Union[str, Path]] = None,
        project_root_path: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            local_config_path: Project config file, `<project_root_path>/statesetter.toml` by default.
            project_root_path: Project directory, the current working directory by default.
        """
        root = Path.cwd() if project_root_path is None else Path(project_root_path)
        self._project_root_path = root.resolve()
        if not self._project_root_path.is_dir():
            raise ValueError(
                f"Project root path '{self._project_root_path}' is not a directory."
            )

        if local_config_path is None:
            self._local_config_path = self._project_root_path / LOCAL_CONFIG_FILE_NAME
        else:
            self._local_config_path = Path(local_config_path).resolve()
        self._global_config_path = _default_global_config_path()

        self._reset()

    def __str__(self) -> str:
        return self._config.model_dump_json(by_alias=True, exclude_unset=True)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}.fromdict({reprlib.repr(self._raw)}, project_root_path={self._project_root_path!r})"

    def _validate(self, raw: Dict[str, Any]) -> TopLevelConfig:
        # default paths are relative to the project root
        with change_cwd(self._project_root_path):
            return TopLevelConfig.model_validate(raw)

    def _reset(self) -> None:
        self._loaded_files = set()
        self._config = self._validate({})
        self._raw = self._config.model_dump(by_alias=True)

    def _load_file(
        self,
        parent: Optional[Path],
        path: Path,
        raw: Dict[str, Any],
        graph: nx.DiGraph,
    ) -> None:
        if not path.is_file():
            if parent is None:
                logger.info(f"Config file '{path}' does not exist.")
            else:
                logger.warning(
                    f"Config file '{path}' loaded from '{parent}' does not exist."
                )
            return

        graph.add_node(path)
        if parent is not None:
            graph.add_edge(parent, path)
        if not nx.is_directed_acyclic_graph(graph):
            raise ValueError(_describe_cycles(graph))

        with path.open("rb") as f:
            loaded = tomli.load(f)
        with change_cwd(path.parent):
            parsed = TopLevelConfig.model_validate(loaded)

        # dumping the parsed model stores all paths as absolute
        _merge_into(raw, parsed.model_dump(by_alias=True, exclude_unset=True))
        logger.debug(f"Loaded config file '{path}'")

        for subconfig_path in parsed.subconfigs:
            self._load_file(path, subconfig_path, raw, graph)

    @classmethod
    def fromdict(
        cls,
        config_dict: Dict[str, Any],
        *,
        project_root_path: Optional[Union[str, Path]] = None,
    ) -> "StateSetterConfig":
        instance = cls(project_root_path=project_root_path)
        instance._config = instance._validate(config_dict)
        instance._raw = instance._config.model_dump(by_alias=True, exclude_unset=True)
        return instance

    def todict(self) -> Dict[str, Any]:
        return self._raw

    def load_configs(self) -> None:
        """
        Drop all loaded options and load the global config file followed by the local one.
        """
        self._reset()
        self.load(self._global_config_path)
        self.load(self._local_config_path)

    def load(self, path: Path) -> None:
        """
        Load a config file (and its subconfigs) on top of the options loaded so far.
        Nothing is changed if any of the files is invalid.
        """
        graph = nx.DiGraph()
        raw = deepcopy(self._raw)

        self._load_file(None, Path(path).resolve(), raw, graph)

        self._config = self._validate(raw)
        self._raw = raw
        self._loaded_files.update(graph.nodes)  # pyright: ignore reportGeneralTypeIssues

    @property
    def loaded_files(self) -> FrozenSet[Path]:
        """
        All loaded config files, including the ones loaded through `subconfigs`.
        """
        return frozenset(self._loaded_files)

    @property
    def local_config_path(self) -> Path:
        return self._local_config_path

    @property
    def global_config_path(self) -> Path:
        return self._global_config_path

    @property
    def project_root_path(self) -> Path:
        return self._project_root_path

    @property
    def general(self) -> GeneralConfig:
        return self._config.general

    @property
    def backend(self) -> BackendConfig:
        return self._config.backend

    @property
    def layouts(self) -> LayoutsConfig:
        return self._config.layouts

    @property
    def resolver(self) -> ResolverConfig:
        return self._config.resolver
