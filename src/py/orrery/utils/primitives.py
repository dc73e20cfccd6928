from typing import Any
from pathlib import Path
from enum import Enum

TLiteral = bool | int | float | str | bytes
TPrimitive = TLiteral | list[Any] | dict[str, Any] | tuple[Any, ...] | None


def asPrimitive(value: Any) -> Any:
	"""Converts the given value to a primitive value, that can be converted
	to JSON. Named tuples become dictionaries of their fields."""
	if value is None or type(value) in (bool, float, int, str):
		return value
	elif isinstance(value, tuple) and hasattr(value, "_fields"):
		return {k: asPrimitive(getattr(value, k)) for k in value._fields}
	elif isinstance(value, (list, tuple, set)):
		return [asPrimitive(_) for _ in value]
	elif isinstance(value, dict):
		return {asPrimitive(k): asPrimitive(v) for k, v in value.items()}
	elif isinstance(value, Enum):
		return asPrimitive(value.value)
	elif isinstance(value, Path):
		return str(value)
	else:
		return value


# EOF
