from typing import Any
import json as basejson
from .primitives import asPrimitive


def json(value: Any) -> bytes:
	"""Converts the value to UTF-8 encoded JSON."""
	return basejson.dumps(asPrimitive(value)).encode("utf8")


# EOF
