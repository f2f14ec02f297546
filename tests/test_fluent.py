"""Tests for the fluent action queue and chain handles."""

import asyncio

import pytest

from pomdriver.errors import MissingMemberError, NotCallableError
from pomdriver.fluent import (
    ActionQueue,
    ChainHandle,
    MemberHandle,
    ValueHandle,
    is_value_returning,
    register_value_returning,
    start_chain,
    value_returning,
)


class Recorder:
    """Page-object stand-in that logs every call."""

    title = "Tenants"
    subtitle = None

    def __init__(self):
        self.log = []

    async def step(self, name, delay=0.0):
        await asyncio.sleep(delay)
        self.log.append(name)

    def sync_step(self, name):
        self.log.append(name)
        return "ignored"

    async def fetch_label(self):
        self.log.append("fetch_label")
        return "acme"

    async def extract_identifier_as_int(self):
        self.log.append("extract")
        return 42

    async def explode(self):
        raise RuntimeError("boom")


def chain_over(recorder, **kwargs):
    async def factory():
        return recorder

    return start_chain(factory, **kwargs)


class TestActionQueue:
    """Tests for the bare queue."""

    @pytest.mark.asyncio
    async def test_runs_in_append_order(self):
        queue = ActionQueue()
        seen = []

        def work(name, delay):
            async def run():
                await asyncio.sleep(delay)
                seen.append(name)
                return name

            return run

        first = queue.append(work("a", 0.03))
        second = queue.append(work("b", 0.0))
        await queue.drain()
        assert seen == ["a", "b"]
        assert first.result() == "a"
        assert second.result() == "b"

    @pytest.mark.asyncio
    async def test_failure_propagates_to_later_operations(self):
        queue = ActionQueue()
        ran = []

        async def fail():
            raise ValueError("first failed")

        async def later():
            ran.append("later")

        queue.append(fail)
        task = queue.append(later)
        with pytest.raises(ValueError, match="first failed"):
            await task
        assert ran == []

    @pytest.mark.asyncio
    async def test_drain_on_empty_queue_returns(self):
        await ActionQueue().drain()


class TestChainOrdering:
    """Queued calls execute strictly in submission order."""

    @pytest.mark.asyncio
    async def test_calls_execute_in_submission_order(self):
        recorder = Recorder()
        result = await chain_over(recorder).step("a", 0.03).step("b", 0.0).step("c", 0.01)
        assert recorder.log == ["a", "b", "c"]
        assert result is recorder

    @pytest.mark.asyncio
    async def test_sync_members_are_queued_too(self):
        recorder = Recorder()
        await chain_over(recorder).step("a", 0.01).sync_step("b")
        assert recorder.log == ["a", "b"]

    @pytest.mark.asyncio
    async def test_calls_return_the_chain_root(self):
        chain = chain_over(Recorder())
        assert chain.step("a") is chain
        await chain

    @pytest.mark.asyncio
    async def test_await_includes_calls_appended_while_waiting(self):
        recorder = Recorder()
        chain = chain_over(recorder)
        chain.step("slow", 0.03)

        async def consume():
            return await chain

        waiter = asyncio.ensure_future(consume())
        await asyncio.sleep(0.005)
        chain.step("late")
        assert await waiter is recorder
        assert recorder.log == ["slow", "late"]

    @pytest.mark.asyncio
    async def test_factory_runs_exactly_once(self):
        calls = []
        recorder = Recorder()

        async def factory():
            calls.append(1)
            return recorder

        chain = start_chain(factory)
        chain.step("a").step("b")
        await chain
        await chain
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_sync_factory_is_accepted(self):
        recorder = Recorder()
        chain = start_chain(lambda: recorder)
        assert await chain.step("a") is recorder

    @pytest.mark.asyncio
    async def test_factory_failure_rejects_the_await(self):
        async def factory():
            raise RuntimeError("navigation failed")

        with pytest.raises(RuntimeError, match="navigation failed"):
            await start_chain(factory).step("a")


class TestMemberAccess:
    """Attribute sugar and the explicit get/invoke pair."""

    @pytest.mark.asyncio
    async def test_member_access_is_lazy(self):
        recorder = Recorder()
        handle = chain_over(recorder).step
        assert isinstance(handle, MemberHandle)
        assert recorder.log == []

    @pytest.mark.asyncio
    async def test_awaiting_a_member_yields_its_value(self):
        assert await chain_over(Recorder()).title == "Tenants"

    @pytest.mark.asyncio
    async def test_nested_member_call_returns_the_root(self):
        chain = chain_over(Recorder())
        assert chain.title.upper() is chain
        assert isinstance(await chain, Recorder)

    @pytest.mark.asyncio
    async def test_explicit_get_and_invoke(self):
        recorder = Recorder()
        chain = chain_over(recorder)
        chain.invoke_member("step", "a")
        chain.get_member("step")("b")
        await chain
        assert recorder.log == ["a", "b"]

    def test_private_names_are_not_intercepted(self):
        chain = start_chain(Recorder)
        with pytest.raises(AttributeError):
            chain._anything  # noqa: B018
        assert isinstance(chain.get_member("_anything"), MemberHandle)


class TestValueReturning:
    """Value-returning calls detach from the chain root."""

    def test_default_registrations(self):
        assert is_value_returning("extract_identifier")
        assert is_value_returning("extract_identifier_as_int")
        assert not is_value_returning("step")

    @pytest.mark.asyncio
    async def test_registered_name_yields_value_handle(self):
        recorder = Recorder()
        handle = chain_over(recorder).step("a").extract_identifier_as_int()
        assert isinstance(handle, ValueHandle)
        assert await handle == 42
        assert recorder.log == ["a", "extract"]

    @pytest.mark.asyncio
    async def test_per_chain_value_methods(self):
        handle = chain_over(Recorder(), value_methods=["fetch_label"]).fetch_label()
        assert isinstance(handle, ValueHandle)
        assert await handle == "acme"

    @pytest.mark.asyncio
    async def test_calls_on_value_operate_on_the_value(self):
        recorder = Recorder()
        chain = chain_over(recorder, value_methods=["fetch_label"])
        upper = chain.fetch_label().upper()
        assert isinstance(upper, ValueHandle)
        assert await upper == "ACME"
        assert recorder.log == ["fetch_label"]

    @pytest.mark.asyncio
    async def test_value_side_never_reaches_the_root(self):
        recorder = Recorder()
        chain = chain_over(recorder, value_methods=["fetch_label"])
        with pytest.raises(MissingMemberError, match="'step' does not exist on str"):
            await chain.fetch_label().step("x")
        assert recorder.log == ["fetch_label"]

    @pytest.mark.asyncio
    async def test_decorator_registers_the_name(self):
        class Page:
            @value_returning
            async def count_rows_for_decorator_test(self):
                return 3

        assert is_value_returning("count_rows_for_decorator_test")
        handle = start_chain(Page).count_rows_for_decorator_test()
        assert isinstance(handle, ValueHandle)
        assert await handle == 3

    def test_register_value_returning(self):
        register_value_returning("read_total_for_register_test")
        assert is_value_returning("read_total_for_register_test")


class TestChainErrors:
    """Failures reject the final await and everything queued behind them."""

    @pytest.mark.asyncio
    async def test_missing_member_names_member_and_owner(self):
        with pytest.raises(MissingMemberError) as excinfo:
            await chain_over(Recorder()).nope()
        assert "'nope'" in str(excinfo.value)
        assert "Recorder" in str(excinfo.value)
        assert isinstance(excinfo.value, AttributeError)

    @pytest.mark.asyncio
    async def test_not_callable_member(self):
        with pytest.raises(NotCallableError) as excinfo:
            await chain_over(Recorder()).title("x")
        assert "is not a function on Recorder" in str(excinfo.value)
        assert isinstance(excinfo.value, TypeError)

    @pytest.mark.asyncio
    async def test_failure_rejects_appended_continuations(self):
        recorder = Recorder()
        chain = chain_over(recorder)
        chain.step("a").nope()
        chain.step("after")
        with pytest.raises(MissingMemberError):
            await chain
        assert recorder.log == ["a"]

    @pytest.mark.asyncio
    async def test_method_exception_propagates(self):
        recorder = Recorder()
        with pytest.raises(RuntimeError, match="boom"):
            await chain_over(recorder).explode().step("never")
        assert recorder.log == []

    @pytest.mark.asyncio
    async def test_value_handle_sees_earlier_failure(self):
        with pytest.raises(RuntimeError, match="boom"):
            await chain_over(Recorder()).explode().extract_identifier_as_int()

    @pytest.mark.asyncio
    async def test_value_handle_keeps_result_despite_later_failure(self):
        chain = chain_over(Recorder())
        value = chain.extract_identifier_as_int()
        chain.explode()
        assert await value == 42
        with pytest.raises(RuntimeError, match="boom"):
            await chain

    @pytest.mark.asyncio
    async def test_value_member_keeps_result_despite_later_failure(self):
        chain = chain_over(Recorder(), value_methods=["fetch_label"])
        upper = chain.fetch_label().upper
        chain.explode()
        assert callable(await upper)

    @pytest.mark.asyncio
    async def test_none_member_is_missing(self):
        with pytest.raises(MissingMemberError, match="'subtitle'"):
            await chain_over(Recorder()).subtitle

    @pytest.mark.asyncio
    async def test_calling_a_none_member_is_missing(self):
        with pytest.raises(MissingMemberError, match="'subtitle' does not exist on Recorder"):
            await chain_over(Recorder()).subtitle()


def test_start_chain_returns_chain_handle():
    assert isinstance(start_chain(Recorder), ChainHandle)
