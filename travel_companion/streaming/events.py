"""
Events emitted on the caller-facing stream and their SSE encoding.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class TextDelta:
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class Done:
    def to_payload(self) -> Dict[str, Any]:
        return {"done": True}


@dataclass(frozen=True)
class StreamError:
    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


StreamEvent = Union[TextDelta, Done, StreamError]

# Sent once to flush the event-stream headers; SSE clients ignore comments.
STREAM_OPEN_COMMENT = ": stream open\n\n"


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (Done, StreamError))


def format_sse(event: StreamEvent) -> str:
    """Format as SSE: ``data: {...}\\n\\n``."""
    return "data: " + json.dumps(event.to_payload(), ensure_ascii=False) + "\n\n"
