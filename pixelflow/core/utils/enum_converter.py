"""
Enum helpers for option names.

Border modes, threshold kinds and structuring-element shapes arrive as enum
members or as their names (from settings, step dicts or call sites); these
helpers turn either form into the member, and members back into names.
"""

from typing import Any, Dict, Optional, Type, TypeVar

T = TypeVar("T")


def parse_enum(value: Any, enum_class: Type[T], default: Optional[T], normalize: bool = False) -> Optional[T]:
    """
    Resolve a member or member name to a member of ``enum_class``.

    Args:
        value: Member, name, or None
        enum_class: Target enum
        default: Returned for None and for names that match no member
        normalize: Strip and lowercase string names first

    Returns:
        The member, or ``default``

    Example:
        >>> parse_enum(" Mirror", BorderMode, None, normalize=True)
        <BorderMode.MIRROR: 'mirror'>
    """
    if isinstance(value, enum_class):
        return value
    if value is None:
        return default

    try:
        return enum_class(value.strip().lower() if normalize else value)
    except (ValueError, AttributeError):
        return default


def enum_to_string(value: Any) -> str:
    """Member name as stored in step dicts; other values pass through."""
    return value.value if hasattr(value, "value") else value


def convert_enums_to_strings(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``data`` with every enum member replaced by its name."""
    return {key: enum_to_string(value) for key, value in data.items()}
