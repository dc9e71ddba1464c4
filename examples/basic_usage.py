"""
Basic usage example for diagram-stream.

Simulates a model streaming a tool call's element array and shows what a
renderer is handed after each chunk.
"""

import asyncio
import json

from diagram_stream import HostBridge, StreamingSession


ELEMENTS = [
    {"type": "rectangle", "id": "r1", "x": 10, "y": 10, "width": 120, "height": 60},
    {"type": "text", "id": "t1", "x": 20, "y": 30, "text": "Start"},
    {"type": "arrow", "id": "a1", "points": [[130, 40], [220, 40]]},
    {"type": "ellipse", "id": "e1", "x": 220, "y": 10, "width": 80, "height": 60},
]


class ConsoleBridge(HostBridge):
    """Prints what would be drawn."""

    def render(self, tool_call_id, elements, diff):
        ids = [element["id"] for element in elements]
        print(f"  render {ids} (added {diff.added})")

    def finalize(self, tool_call_id, elements):
        print(f"  final: {len(elements)} elements")


async def main():
    print("=== diagram-stream Basic Usage ===\n")

    session = StreamingSession(ConsoleBridge())
    text = json.dumps(ELEMENTS)

    for i in range(0, len(text), 12):
        session.on_tool_input_delta("call-1", text[i:i + 12])
        # Tokens arrive over time
        await asyncio.sleep(0.01)

    session.on_tool_input_complete("call-1")


if __name__ == "__main__":
    asyncio.run(main())
