"""
Element identity for diff-based rendering.

Recovered elements have no identity between calls, so the renderer keys them
by a field inside each element, selected with a JSONPath expression.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError


class ElementKeyer:
    """Derives a stable key for each element."""

    def __init__(self, path: str = "$.id"):
        self.path = path
        try:
            self._expr = jsonpath_parse(path)
        except (JsonPathLexerError, JsonPathParserError, ValueError) as e:
            raise ValueError(f"Invalid key path '{path}': {e}") from e

    def key(self, element: Any, index: int) -> str:
        """
        Get the key of an element.

        Args:
            element: Recovered element
            index: Position of the element in its sequence

        Returns:
            The matched field as a string, or "#<index>" if there is none
        """
        if isinstance(element, dict):
            matches = self._expr.find(element)
            if matches and matches[0].value is not None:
                return str(matches[0].value)
        return f"#{index}"

    def keys(self, elements: Sequence[Any]) -> List[str]:
        return [self.key(element, i) for i, element in enumerate(elements)]

    def index(self, elements: Sequence[Any]) -> Dict[str, Any]:
        """Map keys to elements. Later duplicates win."""
        return {self.key(element, i): element for i, element in enumerate(elements)}


@dataclass
class ElementDiff:
    """Changes between two rendered element sequences."""
    added: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    # Order or count of keys present on both sides changed
    reordered: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.changed or self.removed or self.reordered)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "added": self.added,
            "changed": self.changed,
            "removed": self.removed,
            "reordered": self.reordered,
        }


def _fingerprint(element: Any) -> str:
    return json.dumps(element, sort_keys=True)


def diff_elements(previous: Sequence[Any], current: Sequence[Any],
                  keyer: ElementKeyer) -> ElementDiff:
    """
    Compare two element sequences by key.

    Args:
        previous: Elements last handed to the renderer
        current: Elements about to be rendered
        keyer: Key extractor shared by both sequences

    Returns:
        Keys that were added, changed or removed, in sequence order
    """
    before = keyer.index(previous)
    after = keyer.index(current)

    diff = ElementDiff()
    for key, element in after.items():
        if key not in before:
            diff.added.append(key)
        elif _fingerprint(before[key]) != _fingerprint(element):
            diff.changed.append(key)

    diff.removed = [key for key in before if key not in after]

    # Duplicate keys collapse in the index, so compare the full key sequences too
    before_keys = [key for key in keyer.keys(previous) if key in after]
    after_keys = [key for key in keyer.keys(current) if key in before]
    diff.reordered = before_keys != after_keys
    return diff
