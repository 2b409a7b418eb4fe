"""
Response protocol: buffered replies, SSE event streams and failure handling.
"""

from .event_loop import BackgroundEventLoop
from .events import Done, StreamError, TextDelta, format_sse, is_terminal
from .session import FALLBACK_REPLY, ChatSession, ResponseStreamer, StreamState

__all__ = [
    'BackgroundEventLoop',
    'ChatSession',
    'ResponseStreamer',
    'StreamState',
    'FALLBACK_REPLY',
    'TextDelta',
    'Done',
    'StreamError',
    'format_sse',
    'is_terminal',
]
