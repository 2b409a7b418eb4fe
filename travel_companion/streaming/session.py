"""
Response orchestration for one chat request.

A ChatSession walks the request through retrieval, composition and the model
call, and owns the decision between the two failure paths:

- FAILED_BEFORE_SEND: nothing has reached the caller yet, so the transport
  can still answer with a single error payload and a non-success status.
- FAILED_MID_SEND: the event stream is already committed, so the failure is
  reported as an error event and the stream is closed.

The commitment is recorded explicitly via ``commit()`` by the transport when
it flushes the event-stream headers.
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage

from travel_companion.clients.chat_model import build_messages, content_text
from travel_companion.exceptions import (
    CompositionFailure,
    ModelCallFailure,
    TravelCompanionError,
)
from travel_companion.models import CityRecord
from travel_companion.rag.fusion import fuse_context
from travel_companion.rag.matcher import match_cities
from travel_companion.rag.prompt import compose_seed
from travel_companion.rag.retriever import SemanticRetriever
from travel_companion.streaming.events import Done, StreamError, StreamEvent, TextDelta

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Aiyoo server ko thoda pani de do 😭💦 brb!"


class StreamState(str, Enum):
    IDLE = "idle"
    RETRIEVING = "retrieving"
    COMPOSING = "composing"
    MODEL_CALL = "model_call"
    STREAMING = "streaming"
    BUFFERING = "buffering"
    COMPLETED = "completed"
    FAILED_BEFORE_SEND = "failed_before_send"
    FAILED_MID_SEND = "failed_mid_send"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {
        StreamState.COMPLETED,
        StreamState.FAILED_BEFORE_SEND,
        StreamState.FAILED_MID_SEND,
        StreamState.CANCELLED,
    }
)


class ChatSession:
    """State machine for answering a single query."""

    def __init__(
        self,
        query: str,
        records: Sequence[CityRecord],
        retriever: SemanticRetriever,
        llm: BaseChatModel,
        top_k: Optional[int] = None,
    ):
        self.query = query
        self.records = records
        self.retriever = retriever
        self.llm = llm
        self.top_k = top_k

        self.state = StreamState.IDLE
        self.committed = False
        self.fused_context: Optional[str] = None
        self.messages: Optional[List[BaseMessage]] = None
        self.failure: Optional[BaseException] = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    async def prepare(self) -> None:
        """
        Retrieve both sources, fuse them and seed the conversation.

        Raises:
            TravelCompanionError: Any failure here is pre-send
        """
        self._expect(StreamState.IDLE)
        self.state = StreamState.RETRIEVING
        preview = self.query[:50]
        logger.info(f"💬 Query received: {preview}")

        try:
            hits = match_cities(self.query, self.records)
            snippets = await self.retriever.retrieve(self.query, self.top_k)

            self.state = StreamState.COMPOSING
            best = hits[0] if hits else None
            if best is not None:
                logger.info(f"📍 Structured match: {best.name}")
            self.fused_context = fuse_context(best, snippets)
            seed = compose_seed(self.fused_context)
            self.messages = build_messages(seed, self.query)
        except TravelCompanionError as e:
            self._fail_before_send(e, e.__cause__)
            raise
        except Exception as e:
            failure = CompositionFailure(f"Failed to compose prompt: {e}")
            self._fail_before_send(failure, e)
            raise failure from e

        self.state = StreamState.MODEL_CALL

    async def reply(self) -> str:
        """
        Buffered mode: await the whole answer.

        Returns:
            The model's full reply text

        Raises:
            TravelCompanionError: On any failure (all pre-send in this mode)
        """
        if self.state is StreamState.IDLE:
            await self.prepare()
        self._expect(StreamState.MODEL_CALL)
        self.state = StreamState.BUFFERING

        try:
            message = await self.llm.ainvoke(self.messages)
        except Exception as e:
            failure = ModelCallFailure(f"Model call failed: {e}")
            self._fail_before_send(failure, e)
            raise failure from e

        self.state = StreamState.COMPLETED
        return content_text(getattr(message, "content", message))

    def commit(self) -> None:
        """Record that the event-stream headers have been sent."""
        self._expect(StreamState.MODEL_CALL)
        self.committed = True
        self.state = StreamState.STREAMING

    async def events(self) -> AsyncIterator[StreamEvent]:
        """
        Streaming mode: forward model increments in arrival order.

        Yields any number of ``TextDelta`` followed by exactly one ``Done``
        or ``StreamError``; nothing is yielded after that.
        """
        if not self.committed:
            raise RuntimeError("events() requires the stream to be committed first")
        self._expect(StreamState.STREAMING)

        stream = self.llm.astream(self.messages)
        try:
            async for chunk in stream:
                yield TextDelta(content_text(getattr(chunk, "content", chunk)))
        except (GeneratorExit, asyncio.CancelledError):
            self.state = StreamState.CANCELLED
            logger.info("🔌 Stream closed by caller")
            raise
        except Exception as e:
            self.state = StreamState.FAILED_MID_SEND
            self.failure = e
            logger.error(f"❌ Streaming error after commit: {e}")
            yield StreamError(str(e) or type(e).__name__)
            return
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        self.state = StreamState.COMPLETED
        logger.info("✅ Stream finished")
        yield Done()

    def _fail_before_send(
        self, failure: BaseException, cause: Optional[BaseException] = None
    ) -> None:
        self.state = StreamState.FAILED_BEFORE_SEND
        self.failure = failure
        detail = f"{failure} (cause: {cause!r})" if cause is not None else str(failure)
        logger.error(f"❌ Request failed before send: {detail}")

    def _expect(self, state: StreamState) -> None:
        if self.state is not state:
            raise RuntimeError(f"Invalid transition from {self.state.value}; expected {state.value}")


class ResponseStreamer:
    """
    Shared, read-only dependencies for building chat sessions.

    Holds no per-request state; one instance serves all requests.
    """

    def __init__(
        self,
        records: Sequence[CityRecord],
        retriever: SemanticRetriever,
        llm: BaseChatModel,
        top_k: Optional[int] = None,
    ):
        self.records = tuple(records)
        self.retriever = retriever
        self.llm = llm
        self.top_k = top_k

    def open_session(self, query: str) -> ChatSession:
        return ChatSession(
            query=query,
            records=self.records,
            retriever=self.retriever,
            llm=self.llm,
            top_k=self.top_k,
        )

    async def reply(self, query: str) -> str:
        """Convenience wrapper for buffered mode."""
        return await self.open_session(query).reply()
