from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, NoReturn, TypeVar, overload

from ._assembler import ReflectionAssembler
from ._config import ContainerConfig, DefinitionConfig
from ._definition import AUTOWIRE_ALL, Autowire, ConfiguredDefinition, Definition, DiscoveredDefinition
from ._exceptions import (
    CircularDependency,
    DefinitionMissing,
    DiscoveryError,
    InvalidReference,
    MalformedParameter,
    UnresolvableDependency,
)
from ._guard import CycleGuard
from ._reflection import SignatureReflector, load_type, type_name
from ._repository import DefinitionRepository


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ._assembler import Assembler
    from ._definition import Mutator, Parameter
    from ._reflection import TypeReflector

    T = TypeVar("T")

    DefinitionSource = Definition | DefinitionConfig | Mapping[str, Any]


class Container:
    """Definition-driven DI container.

    - definitions come from configuration records or `register`
    - constructor arguments resolve by reference, then by type, then by default
    - mutators (setters) are injected after construction, best effort
    - types without a definition can be discovered from their constructor.

    Every `get` builds a new object graph; instances are never cached.
    """

    def __init__(
        self,
        definitions: Iterable[DefinitionSource] = (),
        *,
        discovery: bool = True,
        assembler: Assembler | None = None,
        reflector: TypeReflector | None = None,
    ) -> None:
        self._definitions = DefinitionRepository()
        self._discovery = discovery
        self._assembler = assembler or ReflectionAssembler()
        self._reflector = reflector or SignatureReflector()
        self._lock = threading.RLock()

        for definition in definitions:
            self.add_definition(definition)

    @classmethod
    def from_config(cls, config: ContainerConfig | Mapping[str, Any]) -> Container:
        """Build a container from a whole configuration mapping.

        Example:
          Container.from_config({
              "discovery": False,
              "definitions": [
                  {"concrete": "app.mail.Mailer", "parameters": [{"ref": "smtp"}]},
                  {"concrete": "app.mail.SmtpTransport", "name": "smtp"},
              ],
          })

        """
        if not isinstance(config, ContainerConfig):
            config = ContainerConfig.model_validate(config)

        return cls(
            config.definitions,
            discovery=config.discovery,
            assembler=config.assembler,
            reflector=config.reflector,
        )

    @property
    def definitions(self) -> DefinitionRepository:
        return self._definitions

    def add_definition(self, definition: DefinitionSource) -> Definition:
        """Store a definition, validating raw configuration records first."""
        if not isinstance(definition, Definition):
            if not isinstance(definition, DefinitionConfig):
                definition = DefinitionConfig.model_validate(definition)
            definition = ConfiguredDefinition.from_config(definition)

        with self._lock:
            self._definitions.insert(definition)

        logger.debug("Registered %r", definition)
        return definition

    def register(
        self,
        concrete: type | str,
        *,
        parameters: Iterable[Parameter] = (),
        mutators: Iterable[Mutator] = (),
        autowire: object = AUTOWIRE_ALL,
        name: str | None = None,
        candidate: bool = True,
    ) -> Definition:
        """Register a definition built in code.

        Example:
          container.register(Mailer, parameters=[Parameter(ref="smtp")])
          container.register("app.mail.SmtpTransport", name="smtp", candidate=False)

        """
        try:
            concrete = load_type(concrete)
        except DiscoveryError as e:
            raise ValueError(str(e)) from e

        definition = Definition(
            concrete=concrete,
            parameters=tuple(parameters),
            mutators=tuple(mutators),
            autowire=autowire,  # type: ignore[arg-type]
            candidate=candidate,
            name=name,
        )
        return self.add_definition(definition)

    @overload
    def get(self, concrete: type[T]) -> T: ...

    @overload
    def get(self, concrete: str) -> object: ...

    def get(self, concrete: type[T] | str) -> object:
        """Build a fully wired instance of `concrete`."""
        with self._lock:
            definition = self._require_definition(concrete)
            return self._resolve_definition(definition, CycleGuard())

    def inject(self, instance: T) -> T:
        """Run the mutators of the definition for `type(instance)` on an existing instance."""
        with self._lock:
            definition = self._require_definition(type(instance))
            self._call_mutators(definition, instance, CycleGuard())

        return instance

    def _get_definition(self, concrete: object) -> Definition | None:
        try:
            cls = load_type(concrete)
        except DiscoveryError as e:
            msg = f"Definition for type {concrete!r} is missing: the type cannot be loaded"
            raise DefinitionMissing(msg) from e

        if self._definitions.has_type(cls):
            return self._definitions.get_by_type(cls)

        if self._discovery:
            return self._discover_definition(cls)

        return None

    def _require_definition(self, concrete: object) -> Definition:
        definition = self._get_definition(concrete)

        if definition is None:
            msg = (
                f"Definition for type {type_name(concrete)} is missing from repository. "
                "Provide a definition in the configuration or enable automatic discovery"
            )
            raise DefinitionMissing(msg)

        return definition

    def _discover_definition(self, concrete: type) -> Definition:
        try:
            definition = DiscoveredDefinition.from_type(concrete, self._reflector)
        except (DiscoveryError, ValueError) as e:
            msg = (
                f"Automatic discovery failed while creating a definition for type {type_name(concrete)}. "
                "See the chained exception for details"
            )
            raise DefinitionMissing(msg) from e

        with self._lock:
            self._definitions.insert(definition)

        return definition

    def _resolve_definition(self, definition: Definition, guard: CycleGuard) -> object:
        self._lock_definition(definition, guard)

        arguments = [self._get_argument(parameter, guard) for parameter in definition.parameters]
        instance = self._assembler.get_instance(definition.concrete, arguments)

        # only reached on success; a failed resolution discards the whole guard
        guard.detach(definition)

        self._call_mutators(definition, instance, guard)

        return instance

    def _resolve_autowired_definition(self, definition: Definition, guard: CycleGuard) -> object:
        if not definition.candidate:
            msg = (
                f"Definition for type {type_name(definition.concrete)} is excluded from autowiring. "
                "Remove the override or set an explicit reference to another definition"
            )
            raise UnresolvableDependency(msg)

        return self._resolve_definition(definition, guard)

    def _lock_definition(self, definition: Definition, guard: CycleGuard) -> None:
        if definition in guard:
            _raise_circular(definition, guard.slice(definition))

        guard.attach(definition)

    def _lock_mutators(self, definition: Definition, guard: CycleGuard) -> None:
        if guard.is_injecting(definition):
            _raise_circular(definition, guard.injection_slice(definition))

        guard.attach_injection(definition)

    def _get_argument(self, parameter: Parameter, guard: CycleGuard) -> Any:
        """Resolving a parameter.

        Resolution precedence:
        1. explicit reference
        2. type-based autowiring
        3. default value
        4. error.
        """
        if parameter.ref:
            return self._get_argument_by_reference(parameter, guard)

        if parameter.type is not None:
            return self._get_argument_by_type(parameter, guard)

        if parameter.optional:
            return parameter.value

        owner = guard.end()
        label = f" {parameter.name!r}" if parameter.name else ""
        msg = (
            f"Malformed parameter{label} in definition {type_name(owner.concrete)}. "
            "Parameter has no reference, type nor default value"
        )
        raise MalformedParameter(msg)

    def _get_argument_by_reference(self, parameter: Parameter, guard: CycleGuard) -> object:
        ref = parameter.ref

        if not self._definitions.has_name(ref):
            msg = f"Invalid reference to definition {ref!r}, no definition in the configuration matches that name"
            raise InvalidReference(msg)

        return self._resolve_definition(self._definitions.get_by_name(ref), guard)

    def _get_argument_by_type(self, parameter: Parameter, guard: CycleGuard) -> Any:
        owner = guard.end()

        if Autowire.CONSTRUCTOR in owner.autowire:
            try:
                definition = self._get_definition(parameter.type)
            except DefinitionMissing:
                if not parameter.optional:
                    raise
                definition = None

            if definition is not None:
                return self._resolve_autowired_definition(definition, guard)

        if parameter.optional:
            return parameter.value

        msg = (
            f"Parameter of type {type_name(parameter.type)} in definition {type_name(owner.concrete)} "
            "has no default value and couldn't be resolved through autowiring. "
            "Specify the reference explicitly in the configuration"
        )
        raise UnresolvableDependency(msg)

    def _call_mutators(self, definition: Definition, instance: object, guard: CycleGuard) -> None:
        if Autowire.MUTATORS not in definition.autowire:
            return

        self._lock_mutators(definition, guard)

        for mutator in definition.mutators:
            self._call_mutator(mutator, instance, guard)

        guard.detach_injection(definition)

    def _call_mutator(self, mutator: Mutator, instance: object, guard: CycleGuard) -> None:
        try:
            definition = self._get_definition(mutator.type)
        except DefinitionMissing as e:
            logger.warning(
                "Skipping mutator %s.%s: %s", type_name(type(instance)), mutator.name, e.__cause__ or e
            )
            return

        if definition is None:
            logger.warning(
                "Skipping mutator %s.%s: no definition for type %s",
                type_name(type(instance)),
                mutator.name,
                type_name(mutator.type),
            )
            return

        argument = self._resolve_autowired_definition(definition, guard)
        getattr(instance, mutator.name)(argument)


def _raise_circular(definition: Definition, trace: tuple[Definition, ...]) -> NoReturn:
    chain = " -> ".join(type_name(entry.concrete) for entry in (*trace, definition))
    msg = f"Circular dependency detected in class {type_name(definition.concrete)}: {chain}"
    raise CircularDependency(msg, trace=trace)
