"""Sample targets used by ``vetcall demo`` and handy for ``vetcall call``.

Each class records what actually ran in ``calls`` so callers can verify
that a failed dispatch had no side effects.
"""

from __future__ import annotations

from typing import Annotated

from vetcall.domain.markers import Required, announce


class GreetingService:
    """One announced method and one plain method."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    @announce
    def annotated_method(self) -> str:
        self.calls.append("annotated_method")
        return "Executing annotated_method.."

    def non_annotated_method(self) -> str:
        self.calls.append("non_annotated_method")
        return "Executing non_annotated_method.."


class UserService:
    """Both parameters are required and reported under their own names."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def create_user(
        self,
        name: Annotated[str, Required()],
        email: Annotated[str, Required()],
    ) -> str:
        self.calls.append((name, email))
        return f"Created user {name} <{email}>"


class NamedUserService:
    """``name`` is reported as ``username`` in failure messages."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    @announce(label="user creation")
    def create_user(
        self,
        name: Annotated[str, Required(name="username")],
        email: Annotated[str, Required()],
    ) -> str:
        self.calls.append((name, email))
        return f"Created user {name} <{email}>"
