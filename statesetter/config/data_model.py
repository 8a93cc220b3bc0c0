from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

from statesetter.utils import StrEnum


class StateSetterConfigModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class ChainEnum(StrEnum):
    ANVIL = "anvil"
    HARDHAT = "hardhat"
    GANACHE = "ganache"


class GeneralConfig(StateSetterConfigModel):
    json_rpc_timeout: float = 15
    """
    Timeout applied to JSON-RPC requests.
    """


class BackendConfig(StateSetterConfigModel):
    uri: str = "http://localhost:8545"
    """
    URI of the development chain JSON-RPC endpoint (`http(s)://` or `ws(s)://`).
    """
    chain: ChainEnum = ChainEnum.ANVIL
    """
    Which development chain is running at `uri`. Selects the method used to write storage.
    """


class LayoutsConfig(StateSetterConfigModel):
    artifacts_path: Annotated[
        Path, BeforeValidator(lambda p: Path(p).resolve())
    ] = Field(default_factory=lambda: Path.cwd() / "artifacts")
    """
    Hardhat artifacts directory searched for storage layouts.
    """
    storage_layouts_path: Annotated[
        Path, BeforeValidator(lambda p: Path(p).resolve())
    ] = Field(default_factory=lambda: Path.cwd() / "storage-layouts")
    """
    Directory with extracted `<Contract>.json` storage layouts. Searched first.
    """


class ResolverConfig(StateSetterConfigModel):
    max_path_depth: int = Field(default=64, gt=0)
    """
    Maximum number of path segments accepted when resolving a storage location.
    """


class TopLevelConfig(StateSetterConfigModel):
    subconfigs: List[Annotated[Path, BeforeValidator(lambda p: Path(p).resolve())]] = []
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    layouts: LayoutsConfig = Field(default_factory=LayoutsConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
