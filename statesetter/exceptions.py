from typing import Iterable, Optional


class StateSetterError(Exception):
    """
    Base class for all errors raised while locating, encoding or writing a storage value.
    """


class NotFoundError(StateSetterError):
    """
    A storage variable, type or struct member is missing from the storage layout.
    """


class VariableNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"Storage variable {name} not found")
        self.name = name


class TypeNotFoundError(NotFoundError):
    def __init__(self, type_id: str):
        super().__init__(f"Type {type_id} not found in storage layout")
        self.type_id = type_id


class FieldNotFoundError(NotFoundError):
    def __init__(self, struct_label: str, field: str, available: Iterable[str]):
        self.struct_label = struct_label
        self.field = field
        self.available = tuple(available)
        super().__init__(
            f"{struct_label} does not have member {field}. Available fields: {', '.join(self.available)}"
        )


class LayoutNotFoundError(NotFoundError):
    """
    Storage layout could not be found or is internally inconsistent.
    """


class TypeMismatchError(StateSetterError):
    """
    Path segment kind does not match the kind of the container it is applied to.
    """


class UnsupportedError(StateSetterError):
    """
    Value or type encoding is not supported (e.g. strings longer than 31 bytes).
    """


class ValueOverflowError(StateSetterError, OverflowError):
    """
    Value does not fit into the declared byte width of its type.
    """


class PathTooLongError(StateSetterError):
    """
    Path continues past a value that cannot be navigated into.
    """


class PathTooShortError(StateSetterError):
    """
    Path ends at a container (mapping, array or struct) that cannot be written as a single value.
    """


class BackendError(StateSetterError):
    """
    Storage backend failed to read or write a slot. The original exception is available as `__cause__`.
    """

    address: str
    slot: int

    def __init__(self, address: str, slot: int, message: Optional[str] = None):
        self.address = address
        self.slot = slot
        text = f"Storage backend failed for {address} at slot {hex(slot)}"
        if message:
            text += f": {message}"
        super().__init__(text)
