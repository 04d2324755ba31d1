from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ._definition import Definition


class CycleGuard:
    """Insertion-ordered set of definitions whose construction is in progress.

    One guard lives for one top-level resolution and is passed down the
    recursion. Definitions hash by identity, so two equal-looking definitions
    are tracked separately.

    Mutator injection runs after a definition is detached, so the guard keeps
    a second set for definitions whose mutators are being injected.
    """

    def __init__(self) -> None:
        self._entries: dict[Definition, None] = {}
        self._injecting: dict[Definition, None] = {}

    def __contains__(self, definition: Definition) -> bool:
        return definition in self._entries

    def attach(self, definition: Definition) -> None:
        self._entries[definition] = None

    def detach(self, definition: Definition) -> None:
        del self._entries[definition]

    def end(self) -> Definition:
        """Innermost definition being resolved."""
        if not self._entries:
            msg = "No definition is being resolved"
            raise IndexError(msg)
        return next(reversed(self._entries))

    def slice(self, definition: Definition) -> tuple[Definition, ...]:
        """Definitions from `definition` up to the innermost one."""
        return _slice(self._entries, definition)

    def is_injecting(self, definition: Definition) -> bool:
        return definition in self._injecting

    def attach_injection(self, definition: Definition) -> None:
        self._injecting[definition] = None

    def detach_injection(self, definition: Definition) -> None:
        del self._injecting[definition]

    def injection_slice(self, definition: Definition) -> tuple[Definition, ...]:
        return _slice(self._injecting, definition)


def _slice(entries: dict[Definition, None], definition: Definition) -> tuple[Definition, ...]:
    if definition not in entries:
        return ()
    ordered = list(entries)
    return tuple(ordered[ordered.index(definition) :])
