"""Argument type conversion for MCP tools.

Some MCP clients send every argument as a string ("10", "true"). This
decorator converts such strings to the int, float or bool the tool's
signature declares.
"""

import functools
import inspect
from typing import Any, Callable

TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off", ""}


def convert_value(value: Any, annotation: Any) -> Any:
    """Convert a string value to ``annotation`` when it is int, float or bool.

    Raises:
        ValueError: If the string cannot be converted
    """
    if not isinstance(value, str):
        return value

    if annotation is bool:
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ValueError(f"Cannot convert {value!r} to bool")
    if annotation is int:
        return int(value.strip())
    if annotation is float:
        return float(value.strip())
    return value


def type_converter(func: Callable) -> Callable:
    """Wrap an async tool so string arguments match the declared types."""
    signature = inspect.signature(func)

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        bound = signature.bind_partial(*args, **kwargs)
        for name, value in bound.arguments.items():
            annotation = signature.parameters[name].annotation
            try:
                bound.arguments[name] = convert_value(value, annotation)
            except ValueError as e:
                raise ValueError(f"Invalid value for '{name}': {e}") from e
        return await func(*bound.args, **bound.kwargs)

    return wrapper
