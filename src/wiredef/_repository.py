from __future__ import annotations

import logging
from typing import TYPE_CHECKING


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._definition import Definition


class DefinitionRepository:
    """Definitions indexed by concrete type and, when they carry one, by name.

    Inserting a definition for an already stored type replaces it, along with
    the name the replaced definition was stored under.
    """

    def __init__(self) -> None:
        self._by_type: dict[type, Definition] = {}
        self._by_name: dict[str, Definition] = {}

    def insert(self, definition: Definition) -> None:
        previous = self._by_type.get(definition.concrete)
        if previous is not None:
            logger.debug("Replacing definition for %s", definition.concrete.__qualname__)
            if previous.name and self._by_name.get(previous.name) is previous:
                del self._by_name[previous.name]

        self._by_type[definition.concrete] = definition
        if definition.name:
            self._by_name[definition.name] = definition

    def has_type(self, concrete: type) -> bool:
        return concrete in self._by_type

    def get_by_type(self, concrete: type) -> Definition:
        return self._by_type[concrete]

    def has_name(self, name: str) -> bool:
        return name in self._by_name

    def get_by_name(self, name: str) -> Definition:
        return self._by_name[name]
