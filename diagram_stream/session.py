"""
Streaming render session.

Connects the host's tool-input callbacks to the recovery functions and hands
stable element sequences to a renderer. The host is passed in as a bridge
object so every session is independent of the others.
"""

import time
from typing import Callable, List, Optional

from .buffer import StreamBuffer
from .config import StreamConfig
from .keys import ElementDiff, ElementKeyer, diff_elements
from .logging_config import get_logger
from .recover import Element, FinalParseError, Recoverer, get_recoverer, parse_final_elements
from .stability import exclude_incomplete_last_item

logger = get_logger(__name__)


class HostBridge:
    """
    Outbound calls from a session to the host environment.

    Subclass and override the methods the host supports. The defaults only log.
    """

    def render(self, tool_call_id: str, elements: List[Element], diff: ElementDiff):
        """Draw the stable elements of a stream that is still running."""
        logger.debug("Render %s: %d elements %s", tool_call_id, len(elements), diff.to_dict())

    def finalize(self, tool_call_id: str, elements: List[Element]):
        """Draw the authoritative elements once the stream is complete."""
        logger.debug("Final %s: %d elements", tool_call_id, len(elements))

    def report_error(self, tool_call_id: str, error: Exception):
        """Surface an error for a completed stream."""
        logger.error("Tool call %s failed: %s", tool_call_id, error)


class StreamingSession:
    """Tracks one tool call's streamed arguments and drives rendering."""

    def __init__(self, bridge: HostBridge, config: Optional[StreamConfig] = None,
                 recoverer: Optional[Recoverer] = None,
                 keyer: Optional[ElementKeyer] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.bridge = bridge
        self.config = config or StreamConfig()
        self.recoverer = recoverer or get_recoverer(self.config.recovery)
        self.keyer = keyer or ElementKeyer(self.config.key_path)
        self.buffer = StreamBuffer()
        self._clock = clock
        self._rendered: List[Element] = []
        self._last_render: Optional[float] = None
        self._log = logger

    @property
    def tool_call_id(self) -> Optional[str]:
        return self.buffer.tool_call_id

    @property
    def rendered(self) -> List[Element]:
        """Elements most recently handed to the bridge."""
        return list(self._rendered)

    def _begin(self, tool_call_id: str):
        if self.buffer.tool_call_id == tool_call_id:
            return
        if self.buffer.tool_call_id is not None:
            self._log.debug("Replacing stream for new tool call %s", tool_call_id)
        self.buffer.reset(tool_call_id)
        self._rendered = []
        self._last_render = None
        self._log = get_logger(__name__, tool_call_id)

    def on_tool_input_partial(self, tool_call_id: str, text: Optional[str]) -> List[Element]:
        """
        Handle a full snapshot of the streamed arguments.

        Args:
            tool_call_id: Id of the tool call being streamed
            text: Everything received so far

        Returns:
            The stable elements for this snapshot
        """
        self._begin(tool_call_id)
        self.buffer.replace(text)
        return self._update()

    def on_tool_input_delta(self, tool_call_id: str, chunk: str) -> List[Element]:
        """Handle an incremental chunk of the streamed arguments."""
        self._begin(tool_call_id)
        self.buffer.append(chunk)
        return self._update()

    def _update(self) -> List[Element]:
        recovered = self.recoverer.recover(self.buffer.text)
        stable = exclude_incomplete_last_item(recovered)

        if stable == self._rendered:
            return stable
        diff = diff_elements(self._rendered, stable, self.keyer)

        now = self._clock()
        if (self._last_render is not None and
                now - self._last_render < self.config.render_interval):
            self._log.debug("Render debounced (%d stable elements)", len(stable))
            return stable

        try:
            self.bridge.render(self.buffer.tool_call_id, stable, diff)
        except Exception as e:
            # A failed partial render must not stop the stream
            self._log.warning("Render failed: %s", e)
            return stable

        self._rendered = stable
        self._last_render = now
        return stable

    def on_tool_input_complete(self, tool_call_id: str, text: Optional[str] = None) -> List[Element]:
        """
        Handle the end of the stream with one strict parse.

        Args:
            tool_call_id: Id of the tool call that finished
            text: Complete arguments, or None to use the buffered text

        Returns:
            The final elements

        Raises:
            FinalParseError: If the complete text is not a JSON array
        """
        self._begin(tool_call_id)
        if text is not None:
            self.buffer.replace(text)

        try:
            elements = parse_final_elements(self.buffer.text)
        except FinalParseError as e:
            self.bridge.report_error(tool_call_id, e)
            raise

        self._log.info("Stream complete with %d elements", len(elements))
        self.bridge.finalize(tool_call_id, elements)
        self._rendered = elements
        return elements

    def on_tool_cancelled(self, tool_call_id: str):
        """Forget a tool call that will not complete."""
        if self.buffer.tool_call_id != tool_call_id:
            return
        self._log.info("Stream cancelled")
        self.buffer.reset()
        self._rendered = []
        self._last_render = None
        self._log = logger
