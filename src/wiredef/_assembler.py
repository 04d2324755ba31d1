from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable


if TYPE_CHECKING:
    from collections.abc import Sequence

    T = TypeVar("T")


@runtime_checkable
class Assembler(Protocol):
    def get_instance(self, concrete: type[T], arguments: Sequence[Any]) -> T: ...


class ReflectionAssembler:
    """Call the constructor with arguments matched to its declared parameters.

    Arguments are matched in declaration order; keyword-only parameters are
    passed by name, everything before them positionally. Trailing parameters
    without an argument keep their defaults.
    """

    def get_instance(self, concrete: type[T], arguments: Sequence[Any]) -> T:
        if not arguments:
            return concrete()

        args, kwargs = self._materialize_call(inspect.signature(concrete), arguments)
        return concrete(*args, **kwargs)

    def _materialize_call(self, sig: inspect.Signature, arguments: Sequence[Any]) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        declared = [p for p in sig.parameters.values() if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)]
        if len(arguments) > len(declared):
            msg = f"Got {len(arguments)} arguments for a constructor declaring {len(declared)} parameters"
            raise TypeError(msg)

        for p, value in zip(declared, arguments):
            if p.kind is p.KEYWORD_ONLY:
                kwargs[p.name] = value
            else:
                args.append(value)

        return args, kwargs
