"""
Bina Runtime Values
===================
The closed set of values a Bina program can compute. Each variant is a
frozen dataclass so ``Number(1) != Boolean(True)`` and pattern matching
on the class is exhaustive.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Number:
    """A signed 64-bit integer."""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class String:
    value: str

    def __str__(self) -> str:
        return self.value


Value = Number | Boolean | String

Environment = dict[str, Value]


def format_value(value: Value) -> str:
    """Format a value the way `print` writes it."""
    match value:
        case Number() | Boolean() | String():
            return str(value)
        case _:
            raise TypeError(f"Not a Bina value: {value!r}")
