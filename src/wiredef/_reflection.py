from __future__ import annotations

import enum
import importlib
import inspect
import logging
import typing
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol, cast, get_type_hints, runtime_checkable

from ._exceptions import DiscoveryError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable


class ConstructorArgument(NamedTuple):
    name: str
    type: Any
    has_default: bool
    default: Any = None


class SetterArgument(NamedTuple):
    method: str
    type: type


@runtime_checkable
class TypeReflector(Protocol):
    def describe_constructor(self, cls: type) -> list[ConstructorArgument]: ...

    def describe_mutators(self, cls: type) -> list[SetterArgument]: ...


def load_type(identifier: object) -> type:
    """Normalize a type identifier to a class.

    Accepts a class or an import path, either ``"package.module.Class"`` or
    ``"package.module:Class"``. Nested classes need the colon form
    (``"package.module:Outer.Inner"``).
    """
    if inspect.isclass(identifier):
        return identifier

    if not isinstance(identifier, str):
        msg = f"Type identifier must be a class or an import path, got {identifier!r}"
        raise DiscoveryError(msg)

    module_name, sep, qualname = identifier.partition(":")
    if not sep:
        module_name, _, qualname = identifier.rpartition(".")

    if not module_name or not qualname:
        msg = f"Type identifier {identifier!r} is not a valid import path"
        raise DiscoveryError(msg)

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Cannot import module {module_name!r} for type {identifier!r}"
        raise DiscoveryError(msg) from e

    for attr in qualname.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            msg = f"Module {module_name!r} has no attribute {qualname!r}"
            raise DiscoveryError(msg) from e

    if not inspect.isclass(obj):
        msg = f"Type identifier {identifier!r} does not name a class"
        raise DiscoveryError(msg)

    return obj


def is_autowirable(annotation: object) -> bool:
    """Only user classes take part in type-based resolution; builtins and enums never do."""
    return (
        inspect.isclass(annotation)
        and getattr(annotation, "__module__", "") != "builtins"
        and not issubclass(annotation, enum.Enum)
    )


def type_name(cls: object) -> str:
    return getattr(cls, "__qualname__", None) or repr(cls)


class SignatureReflector:
    """Describe types through `inspect` signatures and resolved type hints."""

    def describe_constructor(self, cls: type) -> list[ConstructorArgument]:
        self._check_instantiable(cls)

        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return []

        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError) as e:
            msg = f"Cannot read constructor signature of {type_name(cls)}: {e}"
            raise DiscoveryError(msg) from e

        hints = _get_init_type_hints(cls)

        arguments = []
        for name, p in sig.parameters.items():
            # variadic slots can only be filled explicitly
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            has_default = p.default is not inspect.Parameter.empty
            arguments.append(
                ConstructorArgument(
                    name=name,
                    type=hints.get(name),
                    has_default=has_default,
                    default=p.default if has_default else None,
                )
            )

        return arguments

    def describe_mutators(self, cls: type) -> list[SetterArgument]:
        """Public ``set_*`` methods taking a single class-typed argument, in declaration order."""
        names: dict[str, None] = {}
        for klass in reversed(cls.__mro__):
            for name in vars(klass):
                if name.startswith("set_"):
                    names[name] = None

        setters = []
        for name in names:
            func = inspect.getattr_static(cls, name)
            if not inspect.isfunction(func):
                continue

            params = list(inspect.signature(func).parameters.values())[1:]
            if len(params) != 1 or params[0].kind not in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                continue

            annotation = _get_type_hints(func, owner=cls).get(params[0].name)
            if is_autowirable(annotation):
                setters.append(SetterArgument(method=name, type=annotation))

        return setters

    def _check_instantiable(self, cls: object) -> None:
        if not inspect.isclass(cls):
            msg = f"Cannot discover a definition for {cls!r}: not a class"
            raise DiscoveryError(msg)

        if _is_protocol(cls):
            msg = f"Cannot discover a definition for protocol {type_name(cls)}"
            raise DiscoveryError(msg)

        if inspect.isabstract(cls):
            msg = f"Cannot discover a definition for abstract class {type_name(cls)}"
            raise DiscoveryError(msg)


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and issubclass(tp, cast("type", Protocol)) and getattr(tp, "_is_protocol", False)


def _get_type_hints(func: Callable[..., Any], owner: type) -> dict[str, Any]:
    try:
        hints = get_type_hints(func)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, owner.__name__, owner.__qualname__)
        hints = {}

    return hints


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    return _get_type_hints(inspect.getattr_static(cls, "__init__"), owner=cls)
