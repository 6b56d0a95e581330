"""Read-only descriptors derived from a target type's declared methods."""

from __future__ import annotations

from pydantic import BaseModel, Field

from vetcall.domain.markers import Marker


class ParameterDescriptor(BaseModel):
    """One positional parameter of a dispatchable method.

    Attributes:
        index: Zero-based position, ``self`` excluded.
        name: Declared identifier; the default display name.
        markers: Parameter markers in declaration order.
    """

    model_config = {"frozen": True}

    index: int
    name: str
    markers: tuple[Marker, ...] = Field(default_factory=tuple)

    def has_marker(self, kind: str) -> bool:
        return any(m.kind == kind for m in self.markers)


class MethodDescriptor(BaseModel):
    """A resolved method: its name, owner, parameters and method markers."""

    model_config = {"frozen": True}

    name: str
    owner: str
    parameters: tuple[ParameterDescriptor, ...] = Field(default_factory=tuple)
    markers: tuple[Marker, ...] = Field(default_factory=tuple)

    @property
    def arity(self) -> int:
        return len(self.parameters)
