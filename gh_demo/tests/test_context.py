"""Tests for OperationContext cancellation and deadlines."""

import asyncio

import pytest

from gh_demo.libs.exceptions import ErrorLayer, LayeredError, is_context_error
from gh_demo.utils.context import OperationContext


async def _slow(result: str = "done", delay: float = 5.0) -> str:
    await asyncio.sleep(delay)
    return result


class TestOperationContext:
    def test_no_deadline(self):
        ctx = OperationContext()
        assert ctx.deadline is None
        assert ctx.remaining() is None
        assert not ctx.done

    def test_child_inherits_earlier_deadline(self):
        parent = OperationContext(timeout=1)
        child = parent.child(timeout=60)
        assert child.deadline == parent.deadline

    def test_child_keeps_own_earlier_deadline(self):
        parent = OperationContext(timeout=60)
        child = parent.child(timeout=1)
        assert child.deadline is not None
        assert parent.deadline is not None
        assert child.deadline < parent.deadline

    def test_cancel_propagates_to_children(self):
        parent = OperationContext()
        child = parent.child(timeout=10)
        parent.cancel()
        assert child.cancelled
        assert child.done

    def test_cancel_child_leaves_parent(self):
        parent = OperationContext()
        child = parent.child()
        child.cancel()
        assert not parent.cancelled

    def test_raise_if_done_cancelled(self):
        ctx = OperationContext()
        ctx.cancel()
        with pytest.raises(LayeredError) as exc_info:
            ctx.raise_if_done("create_issue")

        assert exc_info.value.layer == ErrorLayer.CONTEXT
        assert exc_info.value.operation == "create_issue"
        assert "cancelled" in exc_info.value.message

    def test_raise_if_done_expired(self):
        ctx = OperationContext(timeout=0)
        assert ctx.deadline_exceeded
        with pytest.raises(LayeredError) as exc_info:
            ctx.raise_if_done("list_labels")

        assert "timed out" in exc_info.value.message

    def test_raise_if_done_live(self):
        OperationContext(timeout=30).raise_if_done("noop")


class TestRun:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        ctx = OperationContext(timeout=5)
        assert await ctx.run("op", _slow("ok", delay=0)) == "ok"

    @pytest.mark.asyncio
    async def test_propagates_exception(self):
        async def _fail() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await OperationContext(timeout=5).run("op", _fail())

    @pytest.mark.asyncio
    async def test_done_context_never_starts_work(self):
        started = False

        async def _work() -> None:
            nonlocal started
            started = True

        ctx = OperationContext()
        ctx.cancel()
        with pytest.raises(LayeredError) as exc_info:
            await ctx.run("op", _work())

        assert is_context_error(exc_info.value)
        assert not started

    @pytest.mark.asyncio
    async def test_deadline_interrupts_wait(self):
        ctx = OperationContext(timeout=0.05)
        with pytest.raises(LayeredError) as exc_info:
            await ctx.run("get_repository_id", _slow())

        assert exc_info.value.layer == ErrorLayer.CONTEXT
        assert exc_info.value.message == "operation timed out (deadline exceeded)"

    @pytest.mark.asyncio
    async def test_cancel_interrupts_wait(self):
        ctx = OperationContext(timeout=10)
        asyncio.get_running_loop().call_later(0.05, ctx.cancel)

        with pytest.raises(LayeredError) as exc_info:
            await ctx.run("create_issue", _slow())

        assert exc_info.value.message == "operation was cancelled (interrupted by user)"

    @pytest.mark.asyncio
    async def test_parent_cancel_interrupts_child_wait(self):
        parent = OperationContext()
        child = parent.child(timeout=10)
        asyncio.get_running_loop().call_later(0.05, parent.cancel)

        with pytest.raises(LayeredError) as exc_info:
            await child.run("create_issue", _slow())

        assert is_context_error(exc_info.value)
