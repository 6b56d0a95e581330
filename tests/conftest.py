"""Shared pytest fixtures and test helpers for vetcall tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from vetcall.domain.rules import RULE_REGISTRY
from vetcall.plugins.manager import PluginManager
from vetcall.services.dispatch import DispatchEngine
from vetcall.services.introspect import DescriptorCache, MetadataIntrospector


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def plugin_manager() -> PluginManager:
    """Plugin manager with built-ins only (no entry-point discovery)."""
    return PluginManager.with_builtins()


@pytest.fixture
def engine(plugin_manager: PluginManager) -> DispatchEngine:
    """Fail-fast engine with a private descriptor cache."""
    return DispatchEngine(
        introspector=MetadataIntrospector(cache=DescriptorCache()),
        plugin_manager=plugin_manager,
    )


@pytest.fixture
def collecting_engine(plugin_manager: PluginManager) -> DispatchEngine:
    """Engine that reports every failing parameter."""
    return DispatchEngine(plugin_manager=plugin_manager, collect_all=True)


@pytest.fixture(autouse=True)
def _restore_rule_registry() -> Generator[None]:
    """Undo rule registrations made by a test."""
    snapshot = dict(RULE_REGISTRY)
    yield
    RULE_REGISTRY.clear()
    RULE_REGISTRY.update(snapshot)


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty temp directory with no config override in the env.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` so config
    discovery never walks into the developer's own ``vetcall.toml``.
    """
    monkeypatch.delenv("VETCALL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """``-v`` CLI runs enable telemetry; keep it from leaking across tests."""
    yield
    from vetcall.services.telemetry import _current_span, disable_telemetry

    disable_telemetry()
    _current_span.set(None)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """CLI invocations reconfigure the root logger; restore it afterwards."""
    import logging

    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("vetcall")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)
