"""
Best-effort recovery of JSON arrays from truncated stream snapshots.

Tool arguments arrive as a growing string that is usually not valid JSON
until the last chunk. These helpers pull out the elements that are already
fully written so the diagram can be drawn while the array is still streaming.
"""

import json
from typing import Any, Dict, List, Optional, Union

from .logging_config import TRACE, get_logger

logger = get_logger(__name__)

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]
Element = Dict[str, JsonValue]


class FinalParseError(ValueError):
    """Raised when the completed tool input is not a JSON array."""


def _looks_like_array(text: Optional[str]) -> bool:
    return bool(text) and text.strip().startswith("[")


def parse_partial_elements(text: Optional[str]) -> List[Element]:
    """
    Recover the fully written elements of a possibly truncated JSON array.

    Args:
        text: Accumulated stream text, or None if nothing arrived yet

    Returns:
        Parsed elements in array order, or an empty list
    """
    if not _looks_like_array(text):
        return []

    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass

    # Close the array right after the last complete-looking object
    last = text.rfind("}")
    if last < 0:
        return []

    try:
        return json.loads(text[:last + 1] + "]")
    except (ValueError, RecursionError) as e:
        logger.log(TRACE, "Brace boundary at %d not usable: %s", last, e)
        return []


def parse_final_elements(text: Optional[str]) -> List[Element]:
    """
    Strictly parse the complete tool input once the stream has ended.

    Raises:
        FinalParseError: If the text is missing, invalid, or not an array
    """
    if text is None:
        raise FinalParseError("No tool input received")

    try:
        value = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise FinalParseError(f"Invalid JSON in tool input: {e}") from e

    if not isinstance(value, list):
        raise FinalParseError(
            f"Expected a JSON array, got {type(value).__name__}"
        )
    return value


class Recoverer:
    """Strategy for turning a stream snapshot into its complete elements."""

    name = "base"

    def recover(self, text: Optional[str]) -> List[Element]:
        raise NotImplementedError

    def __call__(self, text: Optional[str]) -> List[Element]:
        return self.recover(text)


class BraceScanRecoverer(Recoverer):
    """
    Closes the array after the rightmost '}' and parses once more.

    Known limitation: a '}' inside a string of the trailing partial element
    makes the synthesized array invalid, and nothing is recovered for that
    snapshot. Earlier braces are not tried.
    """

    name = "brace"

    def recover(self, text: Optional[str]) -> List[Element]:
        return parse_partial_elements(text)


class DepthScanRecoverer(Recoverer):
    """
    Decodes array entries one by one and stops at the first partial entry.

    Unlike the brace scan it is not confused by braces inside string values,
    and a nested object closing at the end of the text does not discard the
    elements before it.
    """

    name = "depth"

    def __init__(self):
        self._decoder = json.JSONDecoder()

    def recover(self, text: Optional[str]) -> List[Element]:
        if not _looks_like_array(text):
            return []

        try:
            return json.loads(text)
        except (ValueError, RecursionError):
            pass

        elements: List[Element] = []
        idx = text.index("[") + 1
        end = len(text)

        while idx < end:
            ch = text[idx]
            if ch.isspace() or ch == ",":
                idx += 1
                continue
            if ch == "]":
                break

            try:
                item, next_idx = self._decoder.raw_decode(text, idx)
            except (ValueError, RecursionError):
                logger.log(TRACE, "Partial element at offset %d", idx)
                break

            # A number at the very end may still be gaining digits
            if next_idx == end and isinstance(item, (int, float)) and not isinstance(item, bool):
                break

            elements.append(item)
            idx = next_idx

        return elements


RECOVERERS = {
    BraceScanRecoverer.name: BraceScanRecoverer,
    DepthScanRecoverer.name: DepthScanRecoverer,
}


def get_recoverer(name: str = "brace") -> Recoverer:
    """
    Build a recoverer by strategy name.

    Args:
        name: "brace" (default) or "depth"

    Returns:
        A new Recoverer instance

    Raises:
        ValueError: If the strategy name is unknown
    """
    try:
        return RECOVERERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown recovery strategy '{name}', "
            f"expected one of: {', '.join(sorted(RECOVERERS))}"
        ) from None
