"""Input data decoded from JSON.

The decoded tree keeps JSON's native shape: dicts, lists, strings, numbers,
booleans and None. No schema is applied; the template engine decides how
missing keys and type mismatches fail.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from codegen.errors import ParseError, Phase

JSONValue = Union[
    None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]
]


def lookup(tree: JSONValue, *path: str | int) -> JSONValue | None:
    """Walk a value tree by key or index.

    Args:
        tree: Decoded JSON value
        *path: Keys (for objects) or indexes (for arrays)

    Returns:
        The value at the path, or None if any step is missing or mismatched

    Examples:
        >>> lookup({"a": [{"b": 1}]}, "a", 0, "b")
        1
        >>> lookup({"a": 1}, "a", "b") is None
        True
    """
    current = tree
    for step in path:
        if isinstance(current, dict) and isinstance(step, str):
            if step not in current:
                return None
            current = current[step]
        elif isinstance(current, list) and isinstance(step, int) and not isinstance(step, bool):
            if not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            return None
    return current


@dataclass
class InputData:
    """Value tree decoded from one task's input file.

    Attributes:
        path: File the tree was decoded from
        tree: Decoded JSON value
    """

    path: Path
    tree: JSONValue

    @classmethod
    def decode(cls, path: Path, content: str | bytes) -> "InputData":
        """Decode JSON read from path. Raw bytes must be UTF-8.

        Raises:
            ParseError: If the content is not well-formed UTF-8 JSON
        """
        try:
            if isinstance(content, bytes):
                content = content.decode("utf-8")
            tree = json.loads(content)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(
                f"failed to parse input file '{path}': {e}",
                path=path,
                phase=Phase.DECODE_INPUT,
            ) from e
        return cls(path=path, tree=tree)

    def get(self, *path: str | int) -> JSONValue | None:
        """Look up a value by key/index path (None if absent)."""
        return lookup(self.tree, *path)

    def as_context(self, root_variable: str = "root") -> dict[str, Any]:
        """Build the template execution context.

        Top-level keys of an object root become template variables. The whole
        tree is also bound to root_variable unless a key of that name exists.
        """
        context: dict[str, Any] = {root_variable: self.tree}
        if isinstance(self.tree, Mapping):
            context.update(self.tree)
        return context
