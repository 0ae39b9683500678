import json
from typing import Any, Optional


def to_json(data: Any, indent: Optional[int] = 2, ensure_ascii: bool = False) -> str:
    """
    Convert Python object to JSON string.

    Args:
        data: Python object (dict, list, etc.)
        indent: Indentation level for pretty-printing (None for compact output)
        ensure_ascii: If True, escape non-ASCII chars (default: False)

    Returns:
        str: JSON string
    """
    return json.dumps(data, ensure_ascii=ensure_ascii, indent=indent, default=str)


def document_to_json(built, indent: Optional[int] = 2) -> str:
    """Serializes a BuiltDocument as {"doc": ..., "html": ...} with the record's camelCase keys."""
    return to_json({"doc": built.doc.to_json_dict(), "html": built.html}, indent=indent)
