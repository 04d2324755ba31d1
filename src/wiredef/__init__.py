"""Definition-driven dependency injection.

This package builds object graphs from declarative definitions: each
definition names a concrete class, how to resolve its constructor arguments
(by named reference, by type, or by default value) and which setters to call
after construction. Classes without a definition can be discovered from
their constructor signatures.

Exports:
- `Container`: resolution engine; `get` builds instances, `inject` runs setters
  on existing ones.
- `Definition`, `Parameter`, `Mutator`, `Autowire`: the definition data model.
- `ContainerConfig`, `DefinitionConfig`: validated configuration records.
- `ReflectionAssembler`, `SignatureReflector`: default construction and
  discovery collaborators, replaceable through `Assembler` and `TypeReflector`.
"""

from ._assembler import Assembler, ReflectionAssembler
from ._config import ContainerConfig, DefinitionConfig, MutatorConfig, ParameterConfig
from ._container import Container
from ._definition import (
    AUTOWIRE_ALL,
    AUTOWIRE_NONE,
    Autowire,
    ConfiguredDefinition,
    Definition,
    DiscoveredDefinition,
    Mutator,
    Parameter,
)
from ._exceptions import (
    CircularDependency,
    DefinitionMissing,
    DiscoveryError,
    InvalidReference,
    MalformedParameter,
    ResolutionError,
    UnresolvableDependency,
)
from ._guard import CycleGuard
from ._reflection import ConstructorArgument, SetterArgument, SignatureReflector, TypeReflector, load_type
from ._repository import DefinitionRepository


__all__ = [
    "AUTOWIRE_ALL",
    "AUTOWIRE_NONE",
    "Assembler",
    "Autowire",
    "CircularDependency",
    "ConfiguredDefinition",
    "ConstructorArgument",
    "Container",
    "ContainerConfig",
    "CycleGuard",
    "Definition",
    "DefinitionConfig",
    "DefinitionMissing",
    "DefinitionRepository",
    "DiscoveredDefinition",
    "DiscoveryError",
    "InvalidReference",
    "MalformedParameter",
    "Mutator",
    "MutatorConfig",
    "Parameter",
    "ParameterConfig",
    "ReflectionAssembler",
    "ResolutionError",
    "SetterArgument",
    "SignatureReflector",
    "TypeReflector",
    "UnresolvableDependency",
    "load_type",
]
