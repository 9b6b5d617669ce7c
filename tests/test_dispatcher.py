"""Unit tests for the hook dispatcher."""

import threading

import pytest

from pushit.exceptions import HookFailureError, MultiError
from pushit.hooks import HookRegistry
from pushit.mapping.dispatcher import HookDispatcher, ResolvedValues
from pushit.mapping.resolver import HookCall


class CountingHooks:
    """Hook registry stand-in that counts invocations."""

    def __init__(self, results=None, failures=()):
        self.results = results or {}
        self.failures = set(failures)
        self.calls = []
        self._lock = threading.Lock()

    def invoke(self, name, args, context):
        with self._lock:
            self.calls.append((name, tuple(args)))
        if name in self.failures:
            raise RuntimeError(f"{name} exploded")
        return self.results.get(name, f"/{name}/{'-'.join(args)}")


class TestResolvedValues:
    """Tests for ResolvedValues."""

    def test_values_are_never_overwritten(self):
        """Test the table only grows."""
        resolved = ResolvedValues({"a": "1"})
        assert resolved.set("a", "2") is False
        assert resolved.set("b", "2") is True
        assert dict(resolved) == {"a": "1", "b": "2"}

    def test_hook_keys_are_canonical(self):
        """Test hook signatures are normalised on read and write."""
        resolved = ResolvedValues()
        resolved.set("[getZoneRoot   fwapi]", "/zones/abc")
        assert "[getZoneRoot fwapi]" in resolved
        assert resolved["[ getZoneRoot fwapi ]"] == "/zones/abc"
        assert list(resolved) == ["[getZoneRoot fwapi]"]

    def test_record_hook_keeps_configured_value(self):
        """Test a bound variable with its own value is not replaced."""
        resolved = ResolvedValues({"root": "%[getZoneRoot fwapi]%/root"})
        call = HookCall("getZoneRoot", ("fwapi",), bound_variable="root")
        resolved.record_hook([call], "/zones/abc")

        assert resolved["[getZoneRoot fwapi]"] == "/zones/abc"
        assert resolved["root"] == "%[getZoneRoot fwapi]%/root"

    def test_record_hook_sets_unbound_alias(self):
        """Test a bound variable without a value gets the hook result."""
        resolved = ResolvedValues()
        call = HookCall("getZoneRoot", ("fwapi",), bound_variable="zone")
        resolved.record_hook([call], "/zones/abc")
        assert resolved["zone"] == "/zones/abc"


class TestHookDispatcher:
    """Tests for HookDispatcher."""

    def test_duplicate_calls_run_once(self):
        """Test two variables sharing a hook cause a single invocation."""
        hooks = CountingHooks(results={"getZoneRoot": "/zones/abc"})
        dispatcher = HookDispatcher(hooks, context="host")
        calls = [
            HookCall("getZoneRoot", ("fwapi",), bound_variable="a"),
            HookCall("getZoneRoot", ("fwapi",), bound_variable="b"),
        ]

        resolved = dispatcher.run_hooks(calls, ResolvedValues())

        assert hooks.calls == [("getZoneRoot", ("fwapi",))]
        assert resolved["[getZoneRoot fwapi]"] == "/zones/abc"
        assert resolved["a"] == "/zones/abc"
        assert resolved["b"] == "/zones/abc"

    def test_different_args_run_separately(self):
        """Test calls with different arguments are distinct."""
        hooks = CountingHooks()
        dispatcher = HookDispatcher(hooks)
        calls = [
            HookCall("getZoneRoot", ("fwapi",), bound_variable="a"),
            HookCall("getZoneRoot", ("vmapi",), bound_variable="b"),
        ]

        resolved = dispatcher.run_hooks(calls, ResolvedValues())

        assert sorted(hooks.calls) == [
            ("getZoneRoot", ("fwapi",)),
            ("getZoneRoot", ("vmapi",)),
        ]
        assert resolved["a"] == "/getZoneRoot/fwapi"
        assert resolved["b"] == "/getZoneRoot/vmapi"

    def test_already_resolved_not_rerun(self):
        """Test a hook that ran earlier in the run is not invoked again."""
        hooks = CountingHooks()
        dispatcher = HookDispatcher(hooks)
        resolved = ResolvedValues({"[getZoneRoot fwapi]": "/cached"})

        dispatcher.run_hooks(
            [HookCall("getZoneRoot", ("fwapi",), bound_variable="zone")], resolved
        )

        assert hooks.calls == []
        assert resolved["zone"] == "/cached"

    def test_no_calls(self):
        """Test an empty call list is a no-op."""
        hooks = CountingHooks()
        resolved = HookDispatcher(hooks).run_hooks([], ResolvedValues())
        assert len(resolved) == 0
        assert hooks.calls == []

    def test_failures_aggregated_without_rollback(self):
        """Test all failures are reported and successes are kept."""
        hooks = CountingHooks(failures={"bad1", "bad2"})
        dispatcher = HookDispatcher(hooks, max_workers=3)
        calls = [
            HookCall("bad1", (), bound_variable="x"),
            HookCall("good", ("a",), bound_variable="y"),
            HookCall("bad2", ("b",), bound_variable="z"),
        ]
        resolved = ResolvedValues()

        with pytest.raises(MultiError) as exc_info:
            dispatcher.run_hooks(calls, resolved)

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert all(isinstance(e, HookFailureError) for e in errors)
        assert sorted(e.hook_name for e in errors) == ["bad1", "bad2"]
        assert len(hooks.calls) == 3
        assert resolved["[good a]"] == "/good/a"
        assert "x" not in resolved

    def test_failure_message(self):
        """Test the hook failure message names the hook and cause."""
        hooks = CountingHooks(failures={"getZoneRoot"})
        with pytest.raises(MultiError) as exc_info:
            HookDispatcher(hooks).run_hooks(
                [HookCall("getZoneRoot", ("fwapi",), bound_variable="r")],
                ResolvedValues(),
            )
        error = exc_info.value.errors[0]
        assert error.hook_args == ("fwapi",)
        assert str(error) == 'Function "getZoneRoot" failed: getZoneRoot exploded'

    def test_context_passed_to_hooks(self):
        """Test the dispatcher passes its context to the registry."""
        seen = []
        registry = HookRegistry()
        registry.register("who", lambda context, *args: seen.append(context) or "me")

        resolved = HookDispatcher(registry, context="root@host").run_hooks(
            [HookCall("who", (), bound_variable="[who]")], ResolvedValues()
        )

        assert seen == ["root@host"]
        assert resolved["[who]"] == "me"


class TestHookConcurrency:
    """Tests that unique hook calls run at the same time."""

    @staticmethod
    def barrier_registry(barrier):
        registry = HookRegistry()
        registry.register("first", lambda context: str(barrier.wait()))
        registry.register("second", lambda context: str(barrier.wait()))
        return registry

    @staticmethod
    def calls():
        return [
            HookCall("first", (), bound_variable="[first]"),
            HookCall("second", (), bound_variable="[second]"),
        ]

    def test_hooks_run_in_parallel(self):
        """Test two hooks that wait for each other both complete."""
        barrier = threading.Barrier(2, timeout=5)
        dispatcher = HookDispatcher(self.barrier_registry(barrier), max_workers=2)

        resolved = dispatcher.run_hooks(self.calls(), ResolvedValues())

        assert sorted(resolved.values()) == ["0", "1"]

    def test_single_worker_runs_one_at_a_time(self):
        """Test hooks waiting for each other fail with a single worker."""
        barrier = threading.Barrier(2, timeout=0.5)
        dispatcher = HookDispatcher(self.barrier_registry(barrier), max_workers=1)

        with pytest.raises(MultiError) as exc_info:
            dispatcher.run_hooks(self.calls(), ResolvedValues())

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert all(isinstance(e.cause, threading.BrokenBarrierError) for e in errors)
