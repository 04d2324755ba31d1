from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ._definition import Definition


class ResolutionError(RuntimeError):
    pass


class DefinitionMissing(ResolutionError):
    """No definition for a requested type or name, and discovery is off or failed."""


class CircularDependency(ResolutionError):
    """A definition was re-entered before its construction completed.

    `trace` holds the definitions forming the cycle, starting with the one
    that was re-entered.
    """

    def __init__(self, msg: str, trace: tuple[Definition, ...] = ()) -> None:
        super().__init__(msg)
        self.trace = trace

    @property
    def types(self) -> list[type]:
        return [definition.concrete for definition in self.trace]


class MalformedParameter(ResolutionError):
    """A parameter has neither reference, type nor usable default."""


class UnresolvableDependency(ResolutionError):
    """A type-based parameter could not be satisfied."""


class InvalidReference(DefinitionMissing, UnresolvableDependency):
    """An explicit reference names no known definition."""


class DiscoveryError(Exception):
    """Raised by type reflectors when a definition cannot be derived from a type."""
