"""
Tests for the chat session state machine and the streaming event sequence.
"""

import pytest

from conftest import FakeChatModel, FakeEmbeddings, FakeVectorIndex


async def _collect(session):
    return [event async for event in session.events()]


def _streamer_with(cities, llm=None, embeddings=None, index=None):
    from travel_companion.rag.retriever import SemanticRetriever
    from travel_companion.streaming import ResponseStreamer

    retriever = SemanticRetriever(embeddings or FakeEmbeddings(), index or FakeVectorIndex([]))
    return ResponseStreamer(cities, retriever, llm or FakeChatModel(), top_k=3)


class TestPrepare:
    """Retrieval and composition before the model call"""

    @pytest.mark.asyncio
    async def test_jaipur_context(self, streamer, chat_model):
        """Both sources end up in the persona turn"""
        from langchain_core.messages import AIMessage, HumanMessage
        from travel_companion.streaming import StreamState

        session = streamer.open_session("3 days in Jaipur under budget")
        await session.prepare()

        assert session.state is StreamState.MODEL_CALL
        assert "Found Data: Jaipur, STATE:Rajasthan, HOTEL:2500, FOOD:800" in session.fused_context
        assert "[from jaipur_tips.txt]: Start at Amber Fort" in session.fused_context

        persona, ack, query = session.messages
        assert isinstance(persona, HumanMessage)
        assert session.fused_context in persona.content
        assert isinstance(ack, AIMessage)
        assert isinstance(query, HumanMessage)
        assert query.content == "3 days in Jaipur under budget"

    @pytest.mark.asyncio
    async def test_nothing_found(self, cities):
        """No city and no snippets still reach the model call"""
        from travel_companion.rag.fusion import NO_CITY_MATCH, NO_SNIPPETS

        llm = FakeChatModel()
        session = _streamer_with(cities, llm=llm).open_session("Best pizza dough recipe?")
        reply = await session.reply()

        assert NO_CITY_MATCH in session.fused_context
        assert NO_SNIPPETS in session.fused_context
        assert len(llm.received) == 1
        assert reply

    @pytest.mark.asyncio
    async def test_retrieval_failure_is_pre_send(self, cities):
        """Retrieval errors fail the session before anything is sent"""
        from travel_companion.exceptions import RetrievalFailure
        from travel_companion.streaming import StreamState

        llm = FakeChatModel()
        streamer = _streamer_with(cities, llm=llm, embeddings=FakeEmbeddings(error=RuntimeError("boom")))
        session = streamer.open_session("Jaipur")

        with pytest.raises(RetrievalFailure):
            await session.prepare()

        assert session.state is StreamState.FAILED_BEFORE_SEND
        assert session.finished
        assert not session.committed
        assert llm.received == []

    @pytest.mark.asyncio
    async def test_prepare_only_once(self, streamer):
        """A session cannot be prepared twice"""
        session = streamer.open_session("Jaipur")
        await session.prepare()

        with pytest.raises(RuntimeError):
            await session.prepare()


class TestBufferedReply:
    """Single-shot mode"""

    @pytest.mark.asyncio
    async def test_reply(self, streamer):
        """The full reply text is returned"""
        from travel_companion.streaming import StreamState

        session = streamer.open_session("Jaipur in 3 days")
        assert await session.reply() == "Jaipur in 3 days? Easy peasy!"
        assert session.state is StreamState.COMPLETED

    @pytest.mark.asyncio
    async def test_model_failure(self, cities):
        """Model errors in buffered mode are pre-send failures"""
        from travel_companion.exceptions import ModelCallFailure
        from travel_companion.streaming import StreamState

        llm = FakeChatModel(invoke_error=RuntimeError("503 from Gemini"))
        session = _streamer_with(cities, llm=llm).open_session("Jaipur")

        with pytest.raises(ModelCallFailure, match="503 from Gemini"):
            await session.reply()
        assert session.state is StreamState.FAILED_BEFORE_SEND

    @pytest.mark.asyncio
    async def test_list_content_flattened(self, cities):
        """Content returned as parts is joined into text"""
        llm = FakeChatModel(reply=[{"type": "text", "text": "Namaste "}, "dost!"])
        reply = await _streamer_with(cities, llm=llm).reply("Goa")
        assert reply == "Namaste dost!"


class TestStreaming:
    """Committed event streams"""

    @pytest.mark.asyncio
    async def test_events_require_commit(self, streamer):
        """events() refuses to run before commitment"""
        session = streamer.open_session("Jaipur")
        await session.prepare()

        with pytest.raises(RuntimeError):
            await _collect(session)

    def test_commit_requires_prepare(self, streamer):
        """Commitment is only valid once the model call is ready"""
        session = streamer.open_session("Jaipur")
        with pytest.raises(RuntimeError):
            session.commit()

    @pytest.mark.asyncio
    async def test_successful_stream(self, streamer):
        """Deltas in order, then one Done"""
        from travel_companion.streaming import Done, StreamState, TextDelta

        session = streamer.open_session("Jaipur")
        await session.prepare()
        session.commit()
        events = await _collect(session)

        assert events == [
            TextDelta("Namaste! "),
            TextDelta("Jaipur is "),
            TextDelta("lovely."),
            Done(),
        ]
        assert session.state is StreamState.COMPLETED
        assert session.committed

    @pytest.mark.asyncio
    async def test_empty_chunks_forwarded(self, cities):
        """Empty increments are forwarded, not dropped"""
        from travel_companion.streaming import TextDelta

        session = _streamer_with(cities, llm=FakeChatModel(chunks=["a", "", "b"])).open_session("Goa")
        await session.prepare()
        session.commit()
        events = await _collect(session)

        assert events[:3] == [TextDelta("a"), TextDelta(""), TextDelta("b")]

    @pytest.mark.asyncio
    async def test_mid_stream_failure(self, cities):
        """A failure after commitment becomes one error event"""
        from travel_companion.streaming import StreamError, StreamState, TextDelta

        llm = FakeChatModel(fail_after=2, stream_error=RuntimeError("connection reset"))
        session = _streamer_with(cities, llm=llm).open_session("Jaipur")
        await session.prepare()
        session.commit()
        events = await _collect(session)

        assert events == [
            TextDelta("Namaste! "),
            TextDelta("Jaipur is "),
            StreamError("connection reset"),
        ]
        assert session.state is StreamState.FAILED_MID_SEND
        assert llm.stream_closed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fail_after", [None, 0, 1, 2, 3])
    async def test_exactly_one_terminal_event(self, cities, fail_after):
        """Whatever fails, the stream ends with exactly one terminal event"""
        from travel_companion.streaming import is_terminal

        llm = FakeChatModel(fail_after=fail_after)
        session = _streamer_with(cities, llm=llm).open_session("Jaipur")
        await session.prepare()
        session.commit()
        events = await _collect(session)

        terminal = [i for i, event in enumerate(events) if is_terminal(event)]
        assert terminal == [len(events) - 1]
        assert session.finished

    @pytest.mark.asyncio
    async def test_cancelled_by_caller(self, cities):
        """Closing the event iterator cancels the session and the model stream"""
        from travel_companion.streaming import StreamState

        llm = FakeChatModel()
        session = _streamer_with(cities, llm=llm).open_session("Jaipur")
        await session.prepare()
        session.commit()

        events = session.events()
        await events.__anext__()
        await events.aclose()

        assert session.state is StreamState.CANCELLED
        assert llm.stream_closed
        assert llm.chunks_sent == 1


class TestSSEFormat:
    """Event payload encoding"""

    def test_payloads(self):
        """Each event encodes as one data line"""
        from travel_companion.streaming import Done, StreamError, TextDelta, format_sse

        assert format_sse(TextDelta("Namaste 🙏")) == 'data: {"text": "Namaste 🙏"}\n\n'
        assert format_sse(Done()) == 'data: {"done": true}\n\n'
        assert format_sse(StreamError("oops")) == 'data: {"error": "oops"}\n\n'


class TestBackgroundEventLoop:
    """Sync bridge to the async pipeline"""

    def test_run_and_iterate(self):
        """Coroutines and async generators run on the loop thread"""
        from travel_companion.streaming import BackgroundEventLoop

        async def double(x):
            return x * 2

        async def count(n):
            for i in range(n):
                yield i

        loop = BackgroundEventLoop(name="test-loop")
        try:
            assert loop.run(double(21)) == 42
            assert list(loop.iterate(count(3))) == [0, 1, 2]
        finally:
            loop.stop()
        assert not loop.running

    def test_errors_propagate(self):
        """Exceptions raised on the loop reach the caller"""
        from travel_companion.streaming import BackgroundEventLoop

        async def fail():
            raise ValueError("bad")

        loop = BackgroundEventLoop(name="test-loop")
        try:
            with pytest.raises(ValueError, match="bad"):
                loop.run(fail())
        finally:
            loop.stop()
