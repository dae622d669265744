"""Unit tests for the interceptor chain executor."""

import pytest

from keyplug_interceptors import (
    ArgumentMismatch,
    FunctionInterceptor,
    Interceptor,
    InterceptorChain,
    InterceptorFailure,
    Phase,
    TargetOperation,
)


def hooks(name, sort_order=0, enabled=True, **callables):
    """Build a function interceptor."""
    return FunctionInterceptor(
        {'name': name, 'sort_order': sort_order, 'enabled': enabled},
        **callables
    )


class TestChainConstruction:
    """Test ordering and snapshotting."""

    def test_sorted_by_sort_order(self, echo_target):
        chain = InterceptorChain(echo_target, [
            hooks("c", 30, after=str),
            hooks("a", 10, after=str),
            hooks("b", 20, after=str),
        ])

        assert [i.name for i in chain.active] == ["a", "b", "c"]

    def test_ties_keep_registration_order(self, echo_target):
        chain = InterceptorChain(echo_target, [
            hooks("first", 5, after=str),
            hooks("second", 5, after=str),
            hooks("early", 1, after=str),
        ])

        assert [i.name for i in chain.active] == ["early", "first", "second"]

    def test_disabled_excluded_from_active(self, echo_target):
        chain = InterceptorChain(echo_target, [
            hooks("on", after=str),
            hooks("off", enabled=False, after=str),
        ])

        assert len(chain) == 1
        assert chain.get_interceptor("off") is not None
        assert [info['name'] for info in chain.list_interceptors()] == ["on", "off"]

    def test_enabled_state_is_captured(self, echo_target, executor):
        upper = hooks("upper", before=lambda v: v.upper())
        chain = InterceptorChain(echo_target, [upper])

        upper.enabled = False

        assert executor.invoke(chain, "x") == "<X>"

    def test_listing_reports_captured_state(self, echo_target, executor):
        upper = hooks("upper", before=lambda v: v.upper())
        chain = InterceptorChain(echo_target, [upper])

        upper.enabled = False

        assert chain.list_interceptors()[0]['enabled'] is True
        assert chain.is_stale()
        assert executor.invoke(chain, "x") == "<X>"

    def test_hooks_by_phase(self, echo_target):
        chain = InterceptorChain(echo_target, [
            hooks("late", 20, before=str.upper, after=str.lower),
            hooks("off", 5, enabled=False, before=str.upper),
            hooks("wrap", 10, around=lambda proceed, v: proceed(v)),
        ])

        assert [i.name for i in chain.hooks(Phase.BEFORE)] == ["late"]
        assert [i.name for i in chain.hooks(Phase.AROUND)] == ["wrap"]
        assert [i.name for i in chain.hooks(Phase.AFTER)] == ["late"]

    def test_capabilities(self):
        interceptor = hooks("both", before=str.upper, after=str.lower)

        assert interceptor.capabilities == {Phase.BEFORE, Phase.AFTER}
        assert not interceptor.supports(Phase.AROUND)
        assert interceptor.describe()['capabilities'] == ["after", "before"]


class TestChainExecution:
    """Test before, around and after semantics."""

    def test_empty_chain_is_direct_call(self, echo_target, executor):
        chain = InterceptorChain(echo_target)

        assert executor.invoke(chain, "sku") == echo_target("sku")

    def test_fully_disabled_chain_is_direct_call(self, echo_target, executor):
        chain = InterceptorChain(echo_target, [
            hooks("b", enabled=False, before=lambda v: "changed"),
            hooks("a", enabled=False, after=lambda r: "changed"),
            hooks("r", enabled=False, around=lambda proceed, v: "changed"),
        ])

        assert executor.invoke(chain, "sku") == "<sku>"

    def test_before_only(self, echo_target, executor):
        b = lambda v: v + "!"
        chain = InterceptorChain(echo_target, [hooks("b", before=b)])

        assert executor.invoke(chain, "x") == echo_target(b("x"))

    def test_after_only(self, echo_target, executor):
        a = lambda r: r * 2
        chain = InterceptorChain(echo_target, [hooks("a", after=a)])

        assert executor.invoke(chain, "x") == a(echo_target("x"))

    def test_around_only(self, echo_target, executor):
        r = lambda proceed, v: "[" + proceed(v + v) + "]"
        chain = InterceptorChain(echo_target, [hooks("r", around=r)])

        assert executor.invoke(chain, "x") == r(echo_target, "x")

    def test_before_returning_none_keeps_arguments(self, echo_target, executor):
        seen = []
        chain = InterceptorChain(echo_target, [hooks("observe", before=seen.append)])

        assert executor.invoke(chain, "x") == "<x>"
        assert seen == ["x"]

    def test_before_returning_tuple_replaces_arguments(self, add_target, executor):
        chain = InterceptorChain(add_target, [
            hooks("swap", before=lambda a, b: (b * 10, a))
        ])

        assert executor.invoke(chain, 1, 2) == 21

    def test_before_ascending_order(self, echo_target, executor):
        chain = InterceptorChain(echo_target, [
            hooks("twenty", 20, before=lambda v: v + "-20"),
            hooks("ten", 10, before=lambda v: v + "-10"),
        ])

        assert executor.invoke(chain, "x") == "<x-10-20>"

    def test_after_ascending_order_not_reversed(self, echo_target, executor):
        chain = InterceptorChain(echo_target, [
            hooks("twenty", 20, after=lambda r: r + "-20"),
            hooks("ten", 10, after=lambda r: r + "-10"),
        ])

        assert executor.invoke(chain, "x") == "<x>-10-20"

    def test_around_lowest_sort_order_outermost(self, echo_target, executor):
        received = {}

        def outer(proceed, v):
            received['outer'] = v
            return "outer(" + proceed(v + "o") + ")"

        def inner(proceed, v):
            received['inner'] = v
            return "inner(" + proceed(v + "i") + ")"

        chain = InterceptorChain(echo_target, [
            hooks("inner", 20, around=inner),
            hooks("outer", 10, around=outer),
        ])

        assert executor.invoke(chain, "x") == "outer(inner(<xoi>))"
        assert received == {'outer': "x", 'inner': "xo"}

    def test_phase_order_in_trail(self, echo_target, executor):
        interceptor = hooks(
            "all",
            before=lambda v: v,
            around=lambda proceed, v: proceed(v),
            after=lambda r: r
        )
        chain = InterceptorChain(echo_target, [interceptor])

        context = executor.run(chain, "x")

        assert context.trail == [
            ("all", Phase.BEFORE),
            ("all", Phase.AROUND),
            ("tests.echo.echo", Phase.INVOKE),
            ("all", Phase.AFTER),
        ]
        assert context.result == "<x>"
        assert context.args == ("x",)

    def test_around_short_circuit(self, echo_target, executor, calls):
        after_seen = []
        chain = InterceptorChain(echo_target, [
            hooks("cached", 10, around=lambda proceed, v: "cached"),
            hooks("observe", 20, after=lambda r: after_seen.append(r) or r),
        ])

        assert executor.invoke(chain, "x") == "cached"
        assert calls == []
        assert after_seen == ["cached"]

    def test_around_short_circuit_skips_inner_arounds(self, echo_target, executor):
        inner_calls = []
        chain = InterceptorChain(echo_target, [
            hooks("outer", 10, around=lambda proceed, v: "stop"),
            hooks("inner", 20, around=lambda proceed, v: inner_calls.append(v) or proceed(v)),
        ])

        assert executor.invoke(chain, "x") == "stop"
        assert inner_calls == []

    def test_around_may_proceed_twice(self, echo_target, executor, calls):
        chain = InterceptorChain(echo_target, [
            hooks("twice", around=lambda proceed, v: proceed(v) + proceed(v + "2"))
        ])

        assert executor.invoke(chain, "x") == "<x><x2>"
        assert calls == ["x", "x2"]

    def test_target_runs_once(self, echo_target, executor, calls):
        chain = InterceptorChain(echo_target, [
            hooks("b", before=str.upper),
            hooks("r", around=lambda proceed, v: proceed(v)),
            hooks("a", after=str.lower),
        ])

        executor.invoke(chain, "x")

        assert calls == ["X"]

    def test_executor_is_reentrant(self, echo_target, executor):
        chain = InterceptorChain(echo_target)

        def nested(proceed, v):
            return executor.invoke(chain, v + "-nested") + proceed(v)

        outer_chain = InterceptorChain(echo_target, [hooks("nested", around=nested)])

        assert executor.invoke(outer_chain, "x") == "<x-nested><x>"

    def test_subclass_hooks(self, echo_target, executor):
        class Suffix(Interceptor):
            name = "suffix"

            def after(self, result):
                return result + "?"

        chain = InterceptorChain(echo_target, [Suffix()])

        assert executor.invoke(chain, "x") == "<x>?"


class TestChainErrors:
    """Test argument checks and failure propagation."""

    def test_wrong_arity_before_any_hook(self, echo_target, executor):
        before_calls = []
        chain = InterceptorChain(echo_target, [
            hooks("b", before=lambda *a: before_calls.append(a))
        ])

        with pytest.raises(ArgumentMismatch):
            executor.invoke(chain, "a", "b")

        assert before_calls == []

    def test_no_arguments(self, echo_target, executor):
        with pytest.raises(ArgumentMismatch):
            executor.invoke(InterceptorChain(echo_target))

    def test_wrong_type(self, add_target, executor):
        with pytest.raises(ArgumentMismatch, match="argument 1 must be int"):
            executor.invoke(InterceptorChain(add_target), 1, "2")

    def test_argument_mismatch_is_type_error(self, add_target, executor):
        with pytest.raises(TypeError):
            executor.invoke(InterceptorChain(add_target), 1)

    def test_before_output_checked(self, add_target, executor):
        chain = InterceptorChain(add_target, [hooks("drop", before=lambda a, b: a)])

        with pytest.raises(ArgumentMismatch, match="drop before"):
            executor.invoke(chain, 1, 2)

    def test_proceed_arguments_checked(self, echo_target, executor, calls):
        chain = InterceptorChain(echo_target, [
            hooks("bad", around=lambda proceed, v: proceed(v, v))
        ])

        with pytest.raises(ArgumentMismatch, match="bad proceed"):
            executor.invoke(chain, "x")

        assert calls == []

    def test_before_failure(self, echo_target, executor, calls):
        def explode(value):
            raise ValueError("boom")

        after_calls = []
        chain = InterceptorChain(echo_target, [
            hooks("explode", 10, before=explode),
            hooks("later", 20, after=lambda r: after_calls.append(r) or r),
        ])

        with pytest.raises(InterceptorFailure) as info:
            executor.invoke(chain, "x")

        assert info.value.interceptor == "explode"
        assert info.value.phase == "before"
        assert isinstance(info.value.__cause__, ValueError)
        assert calls == []
        assert after_calls == []

    def test_target_failure(self, executor):
        def fail(value):
            raise RuntimeError("target down")

        target = TargetOperation(subject="tests", name="fail", func=fail)
        chain = InterceptorChain(target, [hooks("a", after=lambda r: r)])

        with pytest.raises(InterceptorFailure) as info:
            executor.invoke(chain, "x")

        assert info.value.interceptor == "tests.fail"
        assert info.value.phase == "invoke"

    def test_inner_failure_not_rewrapped(self, echo_target, executor):
        def explode(proceed, value):
            raise KeyError("inner")

        chain = InterceptorChain(echo_target, [
            hooks("outer", 10, around=lambda proceed, v: proceed(v)),
            hooks("inner", 20, around=explode),
        ])

        with pytest.raises(InterceptorFailure) as info:
            executor.invoke(chain, "x")

        assert info.value.interceptor == "inner"
        assert info.value.phase == "around"

    def test_after_failure(self, echo_target, executor):
        def explode(result):
            raise ValueError("bad result")

        chain = InterceptorChain(echo_target, [hooks("check", after=explode)])

        with pytest.raises(InterceptorFailure) as info:
            executor.invoke(chain, "x")

        assert info.value.phase == "after"
        assert "bad result" in str(info.value)


class TestHookArguments:
    """Test that before and around hooks are checked against their arguments."""

    @pytest.fixture
    def default_target(self):
        return TargetOperation(
            subject="tests.math", name="add_default", func=lambda a, b=0: a + b
        )

    def test_before_hook_arity(self, default_target, executor):
        chain = InterceptorChain(default_target, [hooks("one", before=lambda a: a)])

        with pytest.raises(ArgumentMismatch, match="one before hook cannot take 2") as info:
            executor.invoke(chain, 1, 2)

        assert not isinstance(info.value, InterceptorFailure)

    def test_before_hook_fits(self, default_target, executor):
        chain = InterceptorChain(default_target, [hooks("one", before=lambda a: a * 10)])

        assert executor.invoke(chain, 1) == 10

    def test_later_before_hook_checked_against_rewritten_arguments(self, default_target, executor):
        second_calls = []
        chain = InterceptorChain(default_target, [
            hooks("widen", 10, before=lambda a: (a, a)),
            hooks("narrow", 20, before=lambda a: second_calls.append(a)),
        ])

        with pytest.raises(ArgumentMismatch, match="narrow before hook"):
            executor.invoke(chain, 1)

        assert second_calls == []

    def test_around_hook_arity(self, default_target, executor):
        chain = InterceptorChain(default_target, [
            hooks("bare", around=lambda proceed: proceed(1))
        ])

        with pytest.raises(ArgumentMismatch, match="bare around hook cannot take 2"):
            executor.invoke(chain, 1, 2)

    def test_around_hook_with_varargs(self, default_target, executor):
        chain = InterceptorChain(default_target, [
            hooks("pass", around=lambda proceed, *args: proceed(*args))
        ])

        assert executor.invoke(chain, 1, 2) == 3

    def test_builtin_type_as_hook(self, echo_target, executor):
        chain = InterceptorChain(echo_target, [hooks("cast", before=str)])

        assert executor.invoke(chain, "x") == "<x>"

    def test_reassigned_hook_is_inspected_again(self):
        interceptor = hooks("swap", before=lambda a: a)
        interceptor.check_arguments(Phase.BEFORE, ("x",))

        interceptor.before = lambda a, b: a

        with pytest.raises(ArgumentMismatch):
            interceptor.check_arguments(Phase.BEFORE, ("x",))
