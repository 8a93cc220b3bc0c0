from .index import LayoutIndex, find_type, find_variable
from .loader import (
    extract_storage_layouts,
    load_storage_layout,
    load_storage_layout_file,
)
from .solc_output import SolcOutputStorageLayout
from .types import EncodingKind, MemberInfo, TypeInfo, ValueKind, VariableInfo
