"""Tests for MetadataIntrospector and DescriptorCache."""

from __future__ import annotations

import gc
import threading
from functools import singledispatchmethod
from typing import Annotated, Any

import pytest

from vetcall.domain.markers import Announce, Required, announce
from vetcall.errors import AmbiguousMethodError, MethodNotFoundError
from vetcall.services.introspect import DescriptorCache, MetadataIntrospector


class _Base:
    def inherited(self, value: Annotated[str, Required()]) -> str:
        return value


class _Target(_Base):
    label = "not callable"

    @announce(label="greet")
    def greet(self, name: Annotated[str, Required(name="username")], punct: str) -> str:
        return f"hi {name}{punct}"

    def nothing(self) -> None:
        return None

    @staticmethod
    def helper(x: Annotated[int, Required()]) -> int:
        return x

    @classmethod
    def build(cls, tag: str) -> str:
        return tag

    def _hidden(self) -> None:
        return None

    def kw_only(self, *, flag: bool) -> bool:
        return flag

    def varargs(self, *items: Any) -> int:
        return len(items)

    @singledispatchmethod
    def overloaded(self, arg: Any) -> str:
        return "any"

    @overloaded.register
    def _(self, arg: int) -> str:
        return "int"

    @announce
    @staticmethod
    def static_ping() -> str:
        return "static"

    @announce(label="factory")
    @classmethod
    def class_ping(cls) -> str:
        return cls.__name__


class TestResolveMethod:
    introspector = MetadataIntrospector()

    def test_describes_parameters_in_order(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "greet")
        assert desc.name == "greet"
        assert desc.owner == "_Target"
        assert desc.arity == 2
        assert [p.name for p in desc.parameters] == ["name", "punct"]
        assert [p.index for p in desc.parameters] == [0, 1]

    def test_parameter_markers(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "greet")
        assert desc.parameters[0].markers == (Required(name="username"),)
        assert desc.parameters[1].markers == ()
        assert desc.parameters[0].has_marker("required")
        assert not desc.parameters[1].has_marker("required")

    def test_method_markers(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "greet")
        assert desc.markers == (Announce(label="greet"),)

    def test_zero_arity(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "nothing")
        assert desc.arity == 0
        assert desc.markers == ()

    def test_staticmethod_keeps_first_parameter(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "helper")
        assert [p.name for p in desc.parameters] == ["x"]

    def test_classmethod_skips_cls(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "build")
        assert [p.name for p in desc.parameters] == ["tag"]

    def test_method_markers_on_staticmethod(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "static_ping")
        assert desc.arity == 0
        assert desc.markers == (Announce(),)

    def test_method_markers_on_classmethod(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "class_ping")
        assert desc.arity == 0
        assert desc.markers == (Announce(label="factory"),)

    def test_inherited_method_resolves(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "inherited")
        assert desc.parameters[0].markers == (Required(),)

    def test_describe_parameters(self) -> None:
        desc = self.introspector.resolve_method(_Target(), "greet")
        assert MetadataIntrospector.describe_parameters(desc) == desc.parameters


class TestResolveFailures:
    introspector = MetadataIntrospector()

    def test_missing_method(self) -> None:
        with pytest.raises(MethodNotFoundError, match="Method not found: deleteUser"):
            self.introspector.resolve_method(_Target(), "deleteUser")

    def test_empty_name(self) -> None:
        with pytest.raises(MethodNotFoundError):
            self.introspector.resolve_method(_Target(), "")

    def test_non_callable_attribute(self) -> None:
        with pytest.raises(MethodNotFoundError, match="not a method"):
            self.introspector.resolve_method(_Target(), "label")

    def test_private_refused_by_default(self) -> None:
        with pytest.raises(MethodNotFoundError, match="not a public method"):
            self.introspector.resolve_method(_Target(), "_hidden")

    def test_private_allowed_when_enabled(self) -> None:
        desc = MetadataIntrospector(allow_private=True).resolve_method(_Target(), "_hidden")
        assert desc.arity == 0

    def test_keyword_only_refused(self) -> None:
        with pytest.raises(MethodNotFoundError, match="not positional"):
            self.introspector.resolve_method(_Target(), "kw_only")

    def test_varargs_refused(self) -> None:
        with pytest.raises(MethodNotFoundError, match="not positional"):
            self.introspector.resolve_method(_Target(), "varargs")

    def test_singledispatch_is_ambiguous(self) -> None:
        with pytest.raises(AmbiguousMethodError) as exc_info:
            self.introspector.resolve_method(_Target(), "overloaded")
        assert exc_info.value.detail["kind"] == "singledispatchmethod"

    def test_instance_attribute_is_not_a_method(self) -> None:
        target = _Target()
        target.dynamic = lambda: None  # type: ignore[attr-defined]
        with pytest.raises(MethodNotFoundError):
            self.introspector.resolve_method(target, "dynamic")


class TestBind:
    introspector = MetadataIntrospector()

    def test_instance_attribute_does_not_shadow(self) -> None:
        target = _Target()
        target.greet = lambda *args: ("shadow", args)  # type: ignore[method-assign]
        assert self.introspector.bind(target, "greet")("Jane", "!") == "hi Jane!"

    def test_classmethod_bound_to_type(self) -> None:
        assert self.introspector.bind(_Target(), "class_ping")() == "_Target"

    def test_staticmethod_unbound(self) -> None:
        assert self.introspector.bind(_Target(), "helper")(3) == 3

    def test_missing_name(self) -> None:
        with pytest.raises(MethodNotFoundError):
            self.introspector.bind(_Target(), "missing")


class TestUnresolvableAnnotations:
    def test_forward_ref_failure_drops_markers(self, caplog: pytest.LogCaptureFixture) -> None:
        class _Broken:
            def run(self, value: "DoesNotExist") -> None:  # type: ignore[name-defined]  # noqa: F821
                return None

        with caplog.at_level("WARNING", logger="vetcall"):
            desc = MetadataIntrospector().resolve_method(_Broken(), "run")
        assert desc.arity == 1
        assert desc.parameters[0].markers == ()
        assert "Could not resolve annotations" in caplog.text


class TestMethodNames:
    def test_public_methods_in_declaration_order(self) -> None:
        names = MetadataIntrospector().method_names(_Target())
        assert names[:4] == ["greet", "nothing", "helper", "build"]
        assert "inherited" in names
        assert "_hidden" not in names
        assert "label" not in names
        assert "overloaded" not in names

    def test_private_included_when_allowed(self) -> None:
        names = MetadataIntrospector(allow_private=True).method_names(_Target())
        assert "_hidden" in names
        assert "__init__" not in names


class TestDescriptorCache:
    def test_same_descriptor_returned(self) -> None:
        cache = DescriptorCache()
        introspector = MetadataIntrospector(cache=cache)
        first = introspector.resolve_method(_Target(), "greet")
        second = introspector.resolve_method(_Target(), "greet")
        assert first is second
        assert (_Target, "greet") in cache
        assert len(cache) == 1

    def test_failures_not_cached(self) -> None:
        cache = DescriptorCache()
        introspector = MetadataIntrospector(cache=cache)
        with pytest.raises(MethodNotFoundError):
            introspector.resolve_method(_Target(), "missing")
        assert len(cache) == 0

    def test_clear(self) -> None:
        cache = DescriptorCache()
        cache.get_or_create(_Target, "k", lambda: 1)  # type: ignore[arg-type,return-value]
        cache.clear()
        assert (_Target, "k") not in cache
        assert len(cache) == 0

    def test_factory_runs_once_under_contention(self) -> None:
        cache = DescriptorCache()
        calls: list[int] = []
        barrier = threading.Barrier(8)

        def factory() -> int:
            calls.append(1)
            return 42

        def worker() -> None:
            barrier.wait()
            assert cache.get_or_create(_Target, "key", factory) == 42  # type: ignore[arg-type]

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(calls) == 1

    def test_no_cache_builds_fresh(self) -> None:
        introspector = MetadataIntrospector()
        assert introspector.cache is None
        first = introspector.resolve_method(_Target(), "greet")
        second = introspector.resolve_method(_Target(), "greet")
        assert first == second
        assert first is not second

    def test_collected_classes_drop_out(self) -> None:
        cache = DescriptorCache()
        introspector = MetadataIntrospector(cache=cache)
        dynamic = type("_Dynamic", (), {"run": lambda self: None})
        introspector.resolve_method(dynamic(), "run")
        assert len(cache) == 1
        del dynamic
        gc.collect()
        assert len(cache) == 0
