"""
Chat routes for the travel companion API.

POST /api/chat        -> Server-Sent Events stream
POST /api/chat/reply  -> single buffered JSON reply
GET  /api/chat/health -> readiness
"""

import logging
from typing import Iterator, Optional

from flask import (
    Blueprint,
    Response,
    current_app,
    g,
    jsonify,
    request,
    stream_with_context,
)

from backend.middlewares import bearer_token_required, rate_limited
from travel_companion.exceptions import TravelCompanionError
from travel_companion.streaming import (
    FALLBACK_REPLY,
    BackgroundEventLoop,
    ChatSession,
    ResponseStreamer,
    format_sse,
)
from travel_companion.streaming.events import STREAM_OPEN_COMMENT

logger = logging.getLogger(__name__)

# Create blueprint
chat_bp = Blueprint("chat", __name__, url_prefix="/api/chat")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def init_chatbot(app, streamer: ResponseStreamer, event_loop: BackgroundEventLoop):
    """
    Register chatbot components on the app.
    Called from create_app() after the RAG system is ready.

    Args:
        app: Flask application
        streamer: Shared ResponseStreamer
        event_loop: Loop that runs the async pipeline
    """
    app.extensions["response_streamer"] = streamer
    app.extensions["event_loop"] = event_loop
    logger.info("Chat routes initialized with chatbot components")


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def _streamer() -> Optional[ResponseStreamer]:
    return current_app.extensions.get("response_streamer")


def _event_loop() -> BackgroundEventLoop:
    return current_app.extensions["event_loop"]


def _read_query() -> Optional[str]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    query = data.get("query")
    if not isinstance(query, str) or not query.strip():
        return None
    return query.strip()


def _caller() -> str:
    user = g.get("user") or {}
    return user.get("email") or request.remote_addr or "anonymous"


def _not_ready():
    return jsonify({"error": "Chatbot system is not initialized"}), 503


def _failed_before_send():
    return jsonify({"error": "request_failed", "reply": FALLBACK_REPLY}), 500


def _event_stream(session: ChatSession, loop: BackgroundEventLoop) -> Iterator[str]:
    """Generator for SSE streaming. Everything in here happens after commitment."""
    yield STREAM_OPEN_COMMENT
    session.commit()

    events = loop.iterate(session.events())
    try:
        for event in events:
            yield format_sse(event)
    finally:
        # Client disconnects close this generator; propagate to the model stream.
        events.close()


# ============================================================================
# API ENDPOINTS
# ============================================================================


@chat_bp.route("/health", methods=["GET"])
def health_check():
    """
    Health check endpoint for chatbot service.
    """
    streamer = _streamer()
    return jsonify(
        {
            "status": "healthy",
            "chatbot_ready": streamer is not None,
            "cities_loaded": len(streamer.records) if streamer else 0,
        }
    ), 200


@chat_bp.route("", methods=["POST"])
@rate_limited
@bearer_token_required
def chat_stream():
    """
    Answer a travel question as a Server-Sent Events stream.

    Request body:
        {"query": "3 days in Jaipur under budget"}

    Response:
        text/event-stream of ``data: {"text": "..."}`` events, terminated by
        ``data: {"done": true}`` or ``data: {"error": "..."}``.
        If anything fails before the stream opens, a 500 JSON payload is
        returned instead.
    """
    streamer = _streamer()
    if streamer is None:
        return _not_ready()

    query = _read_query()
    if query is None:
        return jsonify({"error": "Query is required"}), 400

    caller = _caller()
    logger.info(f"User {caller} asked: {query[:50]}")

    loop = _event_loop()
    session = streamer.open_session(query)
    try:
        loop.run(session.prepare())
    except TravelCompanionError:
        return _failed_before_send()

    logger.info(f"Streaming response to user {caller}...")
    return Response(
        stream_with_context(_event_stream(session, loop)),
        mimetype="text/event-stream",
        headers=SSE_HEADERS,
    )


@chat_bp.route("/reply", methods=["POST"])
@rate_limited
@bearer_token_required
def chat_reply():
    """
    Answer a travel question with one buffered JSON reply.

    Request body:
        {"query": "..."}

    Response:
        {"reply": "..."}
    """
    streamer = _streamer()
    if streamer is None:
        return _not_ready()

    query = _read_query()
    if query is None:
        return jsonify({"error": "Query is required"}), 400

    logger.info(f"User {_caller()} asked (buffered): {query[:50]}")

    session = streamer.open_session(query)
    try:
        reply = _event_loop().run(session.reply())
    except TravelCompanionError:
        return _failed_before_send()

    return jsonify({"reply": reply}), 200
