"""
Mpfmt utilities shared across the package.

Type and value labels for exception messages, kept here to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Methods --------------------------------------------------------------------------------------------------------------


def class_name(obj: Any, fully_qualified: bool = False) -> str:
    """
    Get the class name of an object or a class.

    Both `class_name(mpf(1))` and `class_name(mpf)` return 'mpf'. Builtins are never qualified.

    Examples:
        >>> class_name(10)
        'int'
        >>> from fractions import Fraction
        >>> class_name(Fraction, fully_qualified=True)
        'fractions.Fraction'
    """
    cls = obj if isinstance(obj, type) else obj.__class__
    if fully_qualified and cls.__module__ != "builtins":
        return f"{cls.__module__}.{cls.__name__}"
    return cls.__name__


def fmt_type(obj: Any) -> str:
    """Format the type of obj for exception messages, e.g. '<int>' or '<mpf>'."""
    return f"<{class_name(obj)}>"


def fmt_value(obj: Any, *, max_repr: int = 80) -> str:
    """
    Format a value as a type-value pair for exception messages.

    Long reprs are truncated to max_repr characters and suffixed with '...'.
    A broken __repr__ never raises from here.

    Examples:
        >>> fmt_value("F2x")
        "<str: 'F2x'>"
        >>> fmt_value(42)
        '<int: 42>'
    """
    try:
        repr_ = repr(obj)
    except Exception as e:
        repr_ = f"<{class_name(obj)} object (repr failed: {class_name(e)})>"

    if max_repr > 0 and len(repr_) > max_repr:
        repr_ = repr_[:max_repr] + "..."

    return f"<{class_name(obj)}: {repr_}>"
