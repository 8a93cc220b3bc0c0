from .codec import decode, encode, encode_mapping_key, merge_partial_word
from .path import (
    ArrayIndex,
    LengthMarker,
    MappingKey,
    PathSegment,
    StructField,
    parse_path,
)
from .resolver import ResolvedCell, resolve
from .setter import StateSetter, get_value, set_value
