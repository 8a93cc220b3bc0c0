import enum


class StrEnum(str, enum.Enum):
    """
    Enum whose members are plain strings. `str()` and f-strings give the value, not `ClassName.MEMBER`.
    """

    def __str__(self) -> str:
        return self.value
