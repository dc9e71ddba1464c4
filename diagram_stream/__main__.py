#!/usr/bin/env python3
"""
diagram-stream command-line interface.

Replays recorded tool-argument text through a streaming session to show what
a renderer would draw at each chunk.
"""

import sys
import json
import asyncio
import argparse
from pathlib import Path
from typing import AsyncIterator, List, Optional, TextIO

import aiofiles

from .config import ConfigLoader, StreamConfig
from .keys import ElementDiff
from .logging_config import setup_logging, get_logger
from .recover import Element, FinalParseError, get_recoverer
from .session import HostBridge, StreamingSession
from .stability import exclude_incomplete_last_item

logger = get_logger(__name__)


class PrintingBridge(HostBridge):
    """Writes every render as one JSON line."""

    def __init__(self, out: Optional[TextIO] = None, show_all: bool = False):
        self.out = out or sys.stdout
        self.show_all = show_all
        self.chunk = 0
        self.renders = 0

    def render(self, tool_call_id: str, elements: List[Element], diff: ElementDiff):
        self.renders += 1
        record = {"chunk": self.chunk, "stable": elements}
        if self.show_all:
            record["diff"] = diff.to_dict()
        print(json.dumps(record), file=self.out, flush=True)

    def finalize(self, tool_call_id: str, elements: List[Element]):
        print(json.dumps({"final": elements}), file=self.out, flush=True)


async def read_chunks(path: Path, chunk_size: int) -> AsyncIterator[str]:
    """Yield the file's text in chunks of at most chunk_size characters."""
    async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            yield chunk


async def replay(path: Path, config: StreamConfig, chunk_size: int = 16,
                 out: Optional[TextIO] = None, show_all: bool = False) -> List[Element]:
    """
    Stream a recorded file through a session chunk by chunk.

    Args:
        path: File holding the complete tool-argument text
        config: Session configuration
        chunk_size: Characters delivered per simulated chunk
        out: Where render records are written
        show_all: Include the key diff in each record

    Returns:
        The final elements
    """
    if chunk_size < 1:
        raise ValueError("chunk size must be at least 1")

    bridge = PrintingBridge(out=out, show_all=show_all)
    session = StreamingSession(bridge, config=config)
    tool_call_id = path.stem

    async for chunk in read_chunks(path, chunk_size):
        bridge.chunk += 1
        session.on_tool_input_delta(tool_call_id, chunk)

    elements = session.on_tool_input_complete(tool_call_id)
    logger.info("Replayed %d chunks, %d renders", bridge.chunk, bridge.renders)
    return elements


async def parse_snapshot(path: Path, config: StreamConfig, out: Optional[TextIO] = None):
    """Print the recovered and stable elements of a single snapshot."""
    out = out or sys.stdout
    async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
        text = await f.read()

    recovered = get_recoverer(config.recovery).recover(text)
    stable = exclude_incomplete_last_item(recovered)
    print(json.dumps({"recovered": recovered, "stable": stable}, indent=2), file=out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diagram-stream",
        description="diagram-stream - incremental rendering of streamed JSON element arrays",
        epilog="""
Examples:
  diagram-stream replay elements.json --chunk-size 8
  diagram-stream --recovery depth replay elements.json
  diagram-stream parse truncated.json
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--config", "-c", help="Custom configuration file path")
    parser.add_argument("--recovery", choices=["brace", "depth"],
                        help="Recovery strategy (overrides config)")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug output")
    parser.add_argument("--log-level", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Set logging level")
    parser.add_argument("--log-file", help="Log to file instead of stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    replay_cmd = subparsers.add_parser("replay", help="Replay a file as a chunked stream")
    replay_cmd.add_argument("file", help="File with the complete tool-argument text")
    replay_cmd.add_argument("--chunk-size", "-n", type=int, default=16,
                            help="Characters per chunk (default: 16)")
    replay_cmd.add_argument("--show-all", action="store_true",
                            help="Include key diffs in the output")

    parse_cmd = subparsers.add_parser("parse", help="Recover elements from one snapshot")
    parse_cmd.add_argument("file", help="File with a possibly truncated snapshot")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = ConfigLoader(Path(args.config) if args.config else None).load()
        if args.recovery:
            config.recovery = args.recovery

        setup_logging(
            debug=args.debug or config.debug,
            log_file=Path(args.log_file) if args.log_file else None,
            log_level=args.log_level or config.log_level
        )

        path = Path(args.file)
        if args.command == "replay":
            asyncio.run(replay(path, config, chunk_size=args.chunk_size,
                               show_all=args.show_all))
        else:
            asyncio.run(parse_snapshot(path, config))
    except (FinalParseError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
