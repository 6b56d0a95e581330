"""Tests for the built-in announce plugin."""

from __future__ import annotations

from vetcall.domain.descriptors import MethodDescriptor
from vetcall.domain.markers import Announce, Required
from vetcall.plugins.builtins.announce import AnnouncePlugin, announcement


def _method(name: str = "annotated_method") -> MethodDescriptor:
    return MethodDescriptor(name=name, owner="GreetingService", markers=(Announce(),))


class TestAnnouncement:
    def test_default_label_is_marker_name(self) -> None:
        assert announcement(Announce(), "annotated_method") == (
            "Executing Announce before executing the method annotated_method"
        )

    def test_custom_label(self) -> None:
        assert announcement(Announce(label="audit"), "create_user") == (
            "Executing audit before executing the method create_user"
        )

    def test_blank_label_falls_back(self) -> None:
        assert announcement(Announce(label="  "), "x").startswith("Executing Announce ")


class TestAnnouncePlugin:
    def test_echoes_line(self) -> None:
        lines: list[str] = []
        plugin = AnnouncePlugin(echo=lines.append)
        plugin.pre_invoke(target=object(), method=_method(), marker=Announce(), arguments=())
        assert lines == ["Executing Announce before executing the method annotated_method"]

    def test_ignores_other_markers(self) -> None:
        lines: list[str] = []
        plugin = AnnouncePlugin(echo=lines.append)
        plugin.pre_invoke(target=object(), method=_method(), marker=Required(), arguments=())
        assert lines == []

    def test_without_echo_only_logs(self) -> None:
        plugin = AnnouncePlugin()
        plugin.pre_invoke(target=object(), method=_method(), marker=Announce(), arguments=(1,))
