"""
Accumulation of streamed tool-argument text.

Holds the text received so far for one tool call. The recovery functions are
stateless, so this buffer is the only place a stream's history lives.
"""

from typing import Optional

from .logging_config import TRACE, get_logger

logger = get_logger(__name__)


class StreamBuffer:
    """Append-only text buffer for a single tool call's arguments."""

    def __init__(self, tool_call_id: Optional[str] = None):
        self.tool_call_id = tool_call_id
        self.buffer = ""

    @property
    def text(self) -> str:
        return self.buffer

    def append(self, data: str) -> str:
        """
        Append a streamed delta to the buffer.

        Args:
            data: Raw text chunk

        Returns:
            The full text accumulated so far
        """
        if data:
            self.buffer += data
            logger.log(TRACE, "<<< [%s] %r", self.tool_call_id, data)
        return self.buffer

    def replace(self, text: Optional[str]) -> str:
        """
        Take a full snapshot of the text from the host.

        Snapshots are expected to extend the current text. One that does not
        is still accepted, since ordering is the host's responsibility.
        """
        text = text or ""
        if not text.startswith(self.buffer):
            logger.debug(
                "Snapshot for %s does not extend buffered text (%d -> %d chars)",
                self.tool_call_id, len(self.buffer), len(text)
            )
        self.buffer = text
        return self.buffer

    def reset(self, tool_call_id: Optional[str] = None):
        """Start over for a new tool call."""
        self.tool_call_id = tool_call_id
        self.buffer = ""

    def clear(self):
        """Clear the buffer."""
        self.buffer = ""

    def __len__(self) -> int:
        return len(self.buffer)
