"""
Sentinel objects used by viewcast declarations.

A field default, a render option or a configuration override may legitimately be None,
so "not provided" is marked with the UNSET singleton instead. Sentinels are compared
by identity only.

Sentinels:
    UNSET: An optional argument or option that was not provided

Helper Functions:
    ifnotunset: Return default if value is UNSET, otherwise return value

Example:
    >>> def field(name, default=UNSET): ...
    >>> ifnotunset(UNSET, default="n/a")
    'n/a'
"""

from typing import Any, Final

__all__ = [
    'UNSET',
    'UnsetType',
    'ifnotunset',
]


# Base Sentinel --------------------------------------------------------------------------------------------------------

class _SentinelBase:
    """
    Base class for sentinel singletons.

    Provides a clean repr, identity-based comparison and falsy truth value.
    """
    __slots__ = ('_name',)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f'<{self._name}>'

    def __eq__(self, other: Any) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __bool__(self) -> bool:
        return False


# Sentinel Types -------------------------------------------------------------------------------------------------------

class UnsetType(_SentinelBase):
    """
    Sentinel type for UNSET.

    Distinguishes 'not provided' from 'explicitly set to None'.
    """
    _instance: 'UnsetType | None' = None

    def __new__(cls) -> 'UnsetType':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("UNSET")

    def __reduce__(self) -> tuple:
        """Unpickle to the same singleton."""
        return (self.__class__, ())

    def __copy__(self) -> 'UnsetType':
        return self

    def __deepcopy__(self, memo: dict) -> 'UnsetType':
        return self


# Sentinel Objects -----------------------------------------------------------------------------------------------------

UNSET: Final[UnsetType] = UnsetType()
"""
Sentinel representing an unprovided optional argument.

Use with identity check: `if arg is UNSET:`
"""


# Helper Functions -----------------------------------------------------------------------------------------------------

def ifnotunset(value: Any, *, default: Any = None) -> Any:
    """
    Return value if it's not UNSET, otherwise return default.

    Examples:
        >>> ifnotunset(UNSET, default=10)
        10
        >>> ifnotunset(None, default=10) is None
        True
    """
    return default if value is UNSET else value
