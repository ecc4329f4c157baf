"""Flat text encoding for graph property maps.

Nodes and relationships keep their property map in a single text column.
The encoding looks like a flat JSON object (``{"name":"Alice","age":30}``)
but is produced and parsed by hand so that numeric subtypes survive the
round trip: integers come back as ``int``, values with a decimal point as
``float``.

Decoding is fail-safe. Malformed input never raises, it degrades to an
empty or partial map.
"""

import logging
import re
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

PropertyValue = Union[None, str, int, float, bool]
PropertyMap = Dict[str, PropertyValue]

EMPTY_OBJECT = "{}"

# A comma separates two pairs only if an even number of unescaped quotes follows it
_PAIR_SEPARATOR = re.compile(
    r',(?=(?:(?:[^"\\]|\\.)*"(?:[^"\\]|\\.)*")*(?:[^"\\]|\\.)*$)', re.DOTALL
)
_QUOTED = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)
_ESCAPED_CHAR = re.compile(r"\\(.)", re.DOTALL)
# Chunks stay far below any str/int digit limit
_CHUNK_DIGITS = 500
_CHUNK_BASE = 10**_CHUNK_DIGITS
_INTEGER = re.compile(r"[+-]?\d+")
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def coerce_property_value(value: Any) -> PropertyValue:
    """Coerce a value to a storable primitive.

    ``None``, strings, booleans, integers and floats pass through. Anything
    else is replaced by its string form; the conversion is one-way.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def coerce_properties(properties: Optional[Mapping[str, Any]]) -> PropertyMap:
    """Apply :func:`coerce_property_value` to every entry of a mapping."""
    if not properties:
        return {}
    return {str(key): coerce_property_value(value) for key, value in properties.items()}


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _unquote(text: str) -> str:
    return _ESCAPED_CHAR.sub(r"\1", text[1:-1])


def _is_quoted(text: str) -> bool:
    return _QUOTED.fullmatch(text) is not None


def _long_int_to_text(value: int) -> str:
    """Decimal digits of an int too long for ``str()`` under the digit limit."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    chunks = []
    while value:
        value, chunk = divmod(value, _CHUNK_BASE)
        chunks.append(chunk)
    head, *rest = reversed(chunks)
    return sign + str(head) + "".join(str(chunk).zfill(_CHUNK_DIGITS) for chunk in rest)


def _format_float(value: float) -> str:
    text = repr(float(value))
    # 1e-07 has no decimal point and would otherwise decode as text
    if "e" in text and "." not in text:
        mantissa, exponent = text.split("e", 1)
        text = f"{mantissa}.0e{exponent}"
    return text


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        try:
            return str(int(value))
        except ValueError:
            # Past the digit limit it could not be parsed back either, store it as text
            return f'"{_long_int_to_text(int(value))}"'
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return f'"{_escape(value)}"'
    return f'"{_escape(str(value))}"'


def encode_properties(properties: Optional[Mapping[str, Any]]) -> str:
    """Serialize a property map into its stored text form.

    Args:
        properties: Mapping of string keys to property values

    Returns:
        The encoded map, ``"{}"`` for a missing or empty map
    """
    if not properties:
        return EMPTY_OBJECT

    pairs = [
        f'"{_escape(str(key))}":{_format_value(value)}'
        for key, value in properties.items()
    ]
    return "{" + ",".join(pairs) + "}"


def _parse_value(text: str) -> PropertyValue:
    if text == "null":
        return None
    if _is_quoted(text):
        return _unquote(text)
    if text in ("true", "false"):
        return text == "true"
    try:
        if "." in text:
            if _DECIMAL.fullmatch(text):
                return float(text)
            return text
        if _INTEGER.fullmatch(text):
            return int(text)
    except (ValueError, OverflowError):
        logger.debug(f"Keeping unparseable number as text ({len(text)} chars)")
    return text


def decode_properties(serialized: Optional[str]) -> PropertyMap:
    """Parse the stored text form back into a property map.

    Args:
        serialized: Text produced by :func:`encode_properties` (or anything else)

    Returns:
        A new dictionary. Blank input and ``"{}"`` give an empty map, and so
        does any input that fails to parse.
    """
    if serialized is None or not serialized.strip() or serialized == EMPTY_OBJECT:
        return {}

    properties: PropertyMap = {}
    try:
        content = serialized.strip()
        if content.startswith("{"):
            content = content[1:]
        if content.endswith("}"):
            content = content[:-1]

        if not content.strip():
            return {}

        for pair in _PAIR_SEPARATOR.split(content):
            parts = pair.split(":", 1)
            if len(parts) != 2:
                continue

            key = parts[0].strip()
            value = parts[1].strip()
            if _is_quoted(key):
                key = _unquote(key)

            properties[key] = _parse_value(value)
    except Exception as e:
        logger.debug(f"Discarding undecodable property text {serialized!r}: {e}")
        return {}

    return properties
