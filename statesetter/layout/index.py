from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple

from pydantic import ValidationError

from statesetter.core import get_logger
from statesetter.exceptions import (
    LayoutNotFoundError,
    TypeNotFoundError,
    VariableNotFoundError,
)

from .solc_output import SolcOutputStorageLayout
from .types import TypeInfo, VariableInfo

logger = get_logger(__name__)


class LayoutIndex:
    """
    Read-only index of a contract storage layout. Variables are looked up by name and types by type id.

    Building the index validates that every type referenced from a variable, struct member, mapping key/value
    or array base is present in the layout, so that resolution never meets a dangling type id.
    """

    _variables: Tuple[VariableInfo, ...]
    _variables_by_name: Mapping[str, VariableInfo]
    _types: Mapping[str, TypeInfo]

    def __init__(self, variables: Iterable[VariableInfo], types: Iterable[TypeInfo]):
        self._variables = tuple(variables)
        self._types = MappingProxyType({t.id: t for t in types})

        by_name: Dict[str, VariableInfo] = {}
        for var in self._variables:
            if var.label in by_name:
                logger.debug(
                    f"Storage variable {var.label} declared more than once, keeping slot {by_name[var.label].slot}"
                )
                continue
            by_name[var.label] = var
        self._variables_by_name = MappingProxyType(by_name)

        self._check_references()

    @classmethod
    def from_layout(cls, layout: SolcOutputStorageLayout) -> LayoutIndex:
        types = [
            TypeInfo.from_solc(type_id, info)
            for type_id, info in (layout.types or {}).items()
        ]
        return cls((VariableInfo.from_solc(s) for s in layout.storage), types)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> LayoutIndex:
        """
        Args:
            raw: Storage layout in the solc standard JSON `storageLayout` format.
        """
        try:
            layout = SolcOutputStorageLayout.model_validate(raw)
        except ValidationError as e:
            raise LayoutNotFoundError(f"Invalid storage layout: {e}") from e
        return cls.from_layout(layout)

    def _check_references(self) -> None:
        def check(type_id: str, referenced_from: str) -> None:
            if type_id not in self._types:
                raise LayoutNotFoundError(
                    f"Type {type_id} referenced from {referenced_from} is missing in storage layout"
                )

        for var in self._variables:
            check(var.type, var.label)
        for type_info in self._types.values():
            for member in type_info.members:
                check(member.type, f"{type_info.label}.{member.label}")
            for ref in (type_info.key, type_info.value, type_info.base):
                if ref is not None:
                    check(ref, type_info.label)

    @property
    def variables(self) -> Tuple[VariableInfo, ...]:
        return self._variables

    @property
    def types(self) -> Mapping[str, TypeInfo]:
        return self._types

    def find_variable(self, name: str) -> VariableInfo:
        try:
            return self._variables_by_name[name]
        except KeyError:
            raise VariableNotFoundError(name) from None

    def find_type(self, type_id: str) -> TypeInfo:
        try:
            return self._types[type_id]
        except KeyError:
            raise TypeNotFoundError(type_id) from None


def find_variable(layout: LayoutIndex, name: str) -> VariableInfo:
    return layout.find_variable(name)


def find_type(layout: LayoutIndex, type_id: str) -> TypeInfo:
    return layout.find_type(type_id)
