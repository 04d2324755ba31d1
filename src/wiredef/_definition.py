from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._reflection import is_autowirable, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._config import DefinitionConfig
    from ._reflection import TypeReflector


class Autowire(Enum):
    CONSTRUCTOR = "constructor"
    MUTATORS = "mutators"


AUTOWIRE_NONE: frozenset[Autowire] = frozenset()
AUTOWIRE_ALL: frozenset[Autowire] = frozenset(Autowire)

# legacy integer flags accepted from configuration files
_AUTOWIRE_BITS = {Autowire.CONSTRUCTOR: 1, Autowire.MUTATORS: 2}


def parse_autowire(value: object) -> frozenset[Autowire]:
    """Normalize an autowire policy.

    Accepts an `Autowire` member, a name (``"constructor"``, ``"all"``,
    ``"none"``, ``"constructor|mutators"``), a legacy bitmask (``0``-``3``)
    or any iterable of those.
    """
    if isinstance(value, Autowire):
        return frozenset({value})

    if isinstance(value, bool):
        msg = f"Autowire policy must be named flags or a bitmask, got {value!r}"
        raise TypeError(msg)

    if isinstance(value, int):
        if value < 0 or value > sum(_AUTOWIRE_BITS.values()):
            msg = f"Autowire bitmask {value} is out of range"
            raise ValueError(msg)
        return frozenset(mode for mode, bit in _AUTOWIRE_BITS.items() if value & bit)

    if isinstance(value, str):
        names = [part.strip().lower() for part in value.replace(",", "|").split("|") if part.strip()]
        modes: set[Autowire] = set()
        for name in names:
            if name == "all":
                modes.update(AUTOWIRE_ALL)
            elif name != "none":
                try:
                    modes.add(Autowire(name))
                except ValueError:
                    msg = f"Unknown autowire mode {name!r}, expected one of: constructor, mutators, all, none"
                    raise ValueError(msg) from None
        return frozenset(modes)

    if isinstance(value, Iterable):
        return frozenset().union(*(parse_autowire(item) for item in value))

    msg = f"Autowire policy must be named flags or a bitmask, got {value!r}"
    raise TypeError(msg)


@dataclass(frozen=True)
class Parameter:
    """One constructor argument slot.

    Resolved by `ref`, then by `type`, then by `value` when `optional` is set.
    """

    ref: str | None = None
    type: Any = None
    value: Any = None
    optional: bool = False
    name: str | None = None


@dataclass(frozen=True)
class Mutator:
    """Setter called after construction with an instance resolved for `type`."""

    type: Any
    name: str


def check_definition(concrete: type, parameters: Iterable[Parameter], mutators: Iterable[Mutator]) -> None:
    """Raise ValueError when parameters or mutators don't fit `concrete`."""
    parameters = tuple(parameters)

    try:
        sig = inspect.signature(concrete)
    except (TypeError, ValueError):
        sig = None

    if sig is not None:
        declared = [p for p in sig.parameters.values() if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)]
        if len(parameters) > len(declared):
            msg = (
                f"Definition for {type_name(concrete)} declares {len(parameters)} parameters "
                f"but the constructor accepts {len(declared)}"
            )
            raise ValueError(msg)

        missing = [p.name for p in declared[len(parameters) :] if p.default is inspect.Parameter.empty]
        if missing:
            msg = f"Definition for {type_name(concrete)} provides no parameter for: {', '.join(missing)}"
            raise ValueError(msg)

    for mutator in mutators:
        if not callable(getattr(concrete, mutator.name, None)):
            msg = f"Mutator {mutator.name!r} is not a method of {type_name(concrete)}"
            raise ValueError(msg)


@dataclass(frozen=True, eq=False)
class Definition:
    """Recipe for building one service.

    Definitions compare by identity; the cycle guard and the repository rely on it.
    """

    concrete: type
    parameters: tuple[Parameter, ...] = ()
    mutators: tuple[Mutator, ...] = ()
    autowire: frozenset[Autowire] = AUTOWIRE_ALL
    candidate: bool = True
    name: str | None = None

    def __post_init__(self) -> None:
        if not inspect.isclass(self.concrete):
            msg = f"Definition concrete must be a class, got {self.concrete!r}"
            raise TypeError(msg)

        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "mutators", tuple(self.mutators))
        object.__setattr__(self, "autowire", parse_autowire(self.autowire))
        check_definition(self.concrete, self.parameters, self.mutators)

    def __repr__(self) -> str:
        alias = f" as {self.name!r}" if self.name else ""
        return f"<{type(self).__name__} {type_name(self.concrete)}{alias}>"


class ConfiguredDefinition(Definition):
    @classmethod
    def from_config(cls, record: DefinitionConfig) -> ConfiguredDefinition:
        parameters = [
            Parameter(ref=p.ref, type=p.type, value=p.value, optional=bool(p.optional), name=p.name)
            for p in record.parameters
        ]
        mutators = [Mutator(type=m.type, name=m.name) for m in record.mutators]

        return cls(
            concrete=record.concrete,
            parameters=tuple(parameters),
            mutators=tuple(mutators),
            autowire=record.autowire,
            candidate=record.candidate,
            name=record.name,
        )


class DiscoveredDefinition(Definition):
    @classmethod
    def from_type(cls, concrete: type, reflector: TypeReflector) -> DiscoveredDefinition:
        """Build a definition from the constructor signature and setters of `concrete`.

        Annotations that aren't user classes are dropped, so such arguments
        can only be satisfied by their default value.
        """
        parameters = [
            Parameter(
                type=arg.type if is_autowirable(arg.type) else None,
                value=arg.default,
                optional=arg.has_default,
                name=arg.name,
            )
            for arg in reflector.describe_constructor(concrete)
        ]
        mutators = [Mutator(type=setter.type, name=setter.method) for setter in reflector.describe_mutators(concrete)]

        logger.debug(
            "Discovered %s with %d parameters and %d mutators", type_name(concrete), len(parameters), len(mutators)
        )
        return cls(concrete=concrete, parameters=tuple(parameters), mutators=tuple(mutators))
