"""
Locate and overwrite single values in EVM contract storage using compiler storage layouts.
"""

from .exceptions import (
    BackendError,
    FieldNotFoundError,
    LayoutNotFoundError,
    NotFoundError,
    PathTooLongError,
    PathTooShortError,
    StateSetterError,
    TypeMismatchError,
    TypeNotFoundError,
    UnsupportedError,
    ValueOverflowError,
    VariableNotFoundError,
)
from .layout import LayoutIndex, load_storage_layout, load_storage_layout_file
from .storage import (
    ResolvedCell,
    StateSetter,
    decode,
    encode,
    get_value,
    merge_partial_word,
    resolve,
    set_value,
)
