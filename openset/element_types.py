"""Declared element types of a `Set` and how they combine.

A `Set` may declare the type(s) of the elements it holds. ``None`` means the
set accepts any hashable object. Union and symmetric difference widen the
declared type to cover both operands; intersection and difference keep the
left operand's type and require the two operands to have a type in common.
"""

import logging
import warnings
from collections.abc import Iterable


__all__ = [
    "ElementType",
    "ElementTypeError",
    "ElementTypeWarning",
    "check_compatible",
    "compatible",
    "normalize_element_type",
    "type_name",
    "widen",
]


_logger = logging.getLogger("openset.element_types")

ElementType = tuple[type, ...] | None


class ElementTypeError(TypeError):
    """Raised when an element or an operand does not match a declared element type."""


class ElementTypeWarning(UserWarning):
    @classmethod
    def warn(cls, message: str, stacklevel: int = 0):
        warnings.warn(message, cls, stacklevel=stacklevel + 3)


def normalize_element_type(element_type) -> ElementType:
    """Return `element_type` as ``None`` or a tuple of distinct types.

    Accepts ``None``, a single type, or an iterable of types.
    """
    if element_type is None:
        return None
    if isinstance(element_type, type):
        return (element_type,)
    if isinstance(element_type, Iterable) and not isinstance(element_type, str):
        types = tuple(dict.fromkeys(element_type))
        for t in types:
            if not isinstance(t, type):
                raise TypeError(f"element_type entries must be types, got {t!r}")
        if not types:
            raise TypeError("element_type must name at least one type")
        return types
    raise TypeError(
        f"element_type must be None, a type or an iterable of types, got {element_type!r}"
    )


def type_name(element_type: ElementType) -> str:
    if element_type is None:
        return "any"
    return " | ".join(t.__qualname__ for t in element_type)


def widen(a: ElementType, b: ElementType) -> ElementType:
    """The element type of a set that may hold elements of both `a` and `b`."""
    if a is None or b is None:
        return None
    return tuple(dict.fromkeys(a + b))


def compatible(a: ElementType, b: ElementType) -> bool:
    """Whether sets of types `a` and `b` can hold a common element."""
    if a is None or b is None:
        return True
    return any(issubclass(x, y) or issubclass(y, x) for x in a for y in b)


def check_compatible(a: ElementType, b: ElementType, operation: str) -> None:
    """Apply ``config.on_type_mismatch`` when `a` and `b` are incompatible."""
    from openset.configdefaults import config

    if compatible(a, b):
        return

    msg = (
        f"{operation} between sets of unrelated element types "
        f"{type_name(a)} and {type_name(b)}"
    )
    if config.on_type_mismatch == "raise":
        raise ElementTypeError(msg)
    elif config.on_type_mismatch == "warn":
        _logger.warning(msg)
        ElementTypeWarning.warn(msg, stacklevel=1)
