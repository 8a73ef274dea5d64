"""Tests for Dispatcher.emit() (awaited dispatch)."""

import asyncio

import pytest

from cancelon import AsyncListenerError, Dispatcher, EmitOutcome


class TestAsyncEmit:
    @pytest.mark.asyncio
    async def test_no_listeners(self, dispatcher):
        """Emitting an unknown event reports NO_LISTENERS."""
        assert await dispatcher.emit("doesNotExist") is EmitOutcome.NO_LISTENERS

    @pytest.mark.asyncio
    async def test_mixed_sync_and_async(
        self, quiet_dispatcher, calls, recorder, async_recorder
    ):
        """Sync and async listeners are both legal and run in order."""
        d = quiet_dispatcher
        d.on("a", async_recorder("async-on"))
        d.once("a", recorder("sync-once"))
        d.on("a", recorder("sync-on"))

        assert await d.emit("a") is EmitOutcome.COMPLETED
        assert calls == ["sync-once", "async-on", "sync-on"]

    @pytest.mark.asyncio
    async def test_once_listener_removed(self, quiet_dispatcher, calls, async_recorder):
        """Async once listeners fire once."""
        d = quiet_dispatcher
        d.once("test", async_recorder("once"))

        assert await d.emit("test") is EmitOutcome.COMPLETED
        assert await d.emit("test") is EmitOutcome.NO_LISTENERS
        assert calls == ["once"]

    @pytest.mark.asyncio
    async def test_passes_args_and_kwargs(self, quiet_dispatcher):
        """Async listeners receive the emitted arguments."""
        received = []

        async def listener(*args, **kwargs):
            received.append((args, kwargs))

        quiet_dispatcher.on("a", listener)
        await quiet_dispatcher.emit("a", 1, flag=True)
        assert received == [((1,), {"flag": True})]

    @pytest.mark.asyncio
    async def test_listeners_never_overlap(self, quiet_dispatcher, calls):
        """Each async listener finishes before the next one starts."""
        d = quiet_dispatcher

        def make(tag):
            async def listener():
                calls.append(f"{tag}-start")
                await asyncio.sleep(0.01)
                calls.append(f"{tag}-end")

            return listener

        d.on("a", make("one")).on("a", make("two"))
        await d.emit("a")

        assert calls == ["one-start", "one-end", "two-start", "two-end"]

    @pytest.mark.asyncio
    async def test_once_removed_before_suspension(self, quiet_dispatcher):
        """A suspended once listener is already out of the registry."""
        d = quiet_dispatcher
        release = asyncio.Event()
        started = asyncio.Event()

        async def listener():
            started.set()
            await release.wait()

        d.once("a", listener)
        task = asyncio.create_task(d.emit("a"))
        await started.wait()

        assert d.listeners("a") == []
        assert await d.emit("a") is EmitOutcome.NO_LISTENERS

        release.set()
        assert await task is EmitOutcome.COMPLETED

    @pytest.mark.asyncio
    async def test_awaitable_objects(self, quiet_dispatcher, calls):
        """Any awaitable result is awaited, not only coroutines."""
        d = quiet_dispatcher

        def returns_future():
            future = asyncio.get_running_loop().create_future()
            future.set_result(False)
            calls.append("future")
            return future

        d.on("a", returns_future).on("a", lambda: calls.append("skipped"))

        assert await d.emit("a") is EmitOutcome.CANCELED
        assert calls == ["future"]

    @pytest.mark.asyncio
    async def test_emit_async_alias(self, quiet_dispatcher, calls, recorder):
        """emit_async is emit."""
        quiet_dispatcher.on("a", recorder(1))
        assert await quiet_dispatcher.emit_async("a") is EmitOutcome.COMPLETED
        assert calls == [1]


class TestAsyncEmitCancel:
    @pytest.mark.asyncio
    async def test_resolved_false_cancels(
        self, quiet_dispatcher, calls, async_recorder, recorder
    ):
        """A listener resolving to False stops dispatch."""
        d = quiet_dispatcher
        d.on("test", async_recorder(0, result=False))
        d.on("test", recorder(1))

        assert await d.emit("test") is EmitOutcome.CANCELED
        assert calls == [0]

    @pytest.mark.asyncio
    async def test_sync_false_cancels(self, quiet_dispatcher, calls, recorder):
        """A sync listener returning False cancels the awaited path too."""
        d = quiet_dispatcher
        d.on("test", recorder(0, result=False)).on("test", recorder(1))

        assert await d.emit("test") is EmitOutcome.CANCELED
        assert calls == [0]

    @pytest.mark.asyncio
    async def test_cancel_from_once(self, quiet_dispatcher, calls, recorder, async_recorder):
        """A canceling once listener skips the persistent ones."""
        d = quiet_dispatcher
        d.on("x", recorder("f")).on("x", recorder("g"))
        d.once("x", async_recorder("h", result=False))

        assert await d.emit("x") is EmitOutcome.CANCELED
        assert calls == ["h"]
        assert d.listener_count("x") == 2


class TestAsyncEmitErrors:
    @pytest.mark.asyncio
    async def test_listener_exception_propagates(
        self, quiet_dispatcher, calls, recorder
    ):
        """Async listener errors reach the caller of emit()."""
        d = quiet_dispatcher

        async def broken():
            raise ValueError("boom")

        d.on("x", broken).on("x", recorder("after"))

        with pytest.raises(ValueError, match="boom"):
            await d.emit("x")
        assert calls == []

    @pytest.mark.asyncio
    async def test_meta_events_stay_synchronous(self, quiet_dispatcher):
        """An async removeListener listener fails even on the awaited path."""
        d = quiet_dispatcher

        async def on_remove(event_name, listener):
            pass

        d.on("removeListener", on_remove)
        d.once("x", print)

        with pytest.raises(AsyncListenerError) as exc_info:
            await d.emit("x")
        assert exc_info.value.event_name == "removeListener"

    @pytest.mark.asyncio
    async def test_emit_from_listener(self, quiet_dispatcher, calls, async_recorder):
        """Listeners may await another emission."""
        d = quiet_dispatcher
        d.on("inner", async_recorder("inner"))

        async def outer():
            calls.append("outer")
            assert await d.emit("inner") is EmitOutcome.COMPLETED

        d.on("outer", outer)
        await d.emit("outer")

        assert calls == ["outer", "inner"]


class TestOutcome:
    def test_truthiness(self):
        """Only CANCELED is falsy."""
        assert not EmitOutcome.CANCELED
        assert EmitOutcome.COMPLETED
        assert EmitOutcome.NO_LISTENERS
        assert EmitOutcome.CANCELED.canceled
        assert not EmitOutcome.COMPLETED.canceled

    def test_outcomes_distinct(self):
        """No-listeners and completed are different outcomes."""
        d = Dispatcher()
        assert d.emit_sync("x") is not EmitOutcome.COMPLETED
        d.on("x", print)
        assert d.emit_sync("x", "hello") is EmitOutcome.COMPLETED
