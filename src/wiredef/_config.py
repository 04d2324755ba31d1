"""Validated configuration records.

Raw mappings (typically loaded from YAML/JSON/TOML by the application) are
turned into these models before any definition is built; unknown keys and
mistyped values are rejected with `pydantic.ValidationError`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ._assembler import Assembler
from ._definition import AUTOWIRE_ALL, Autowire, Mutator, Parameter, check_definition, parse_autowire
from ._exceptions import DiscoveryError
from ._reflection import TypeReflector, load_type


def _to_type(value: Any) -> type:
    try:
        return load_type(value)
    except DiscoveryError as e:
        raise ValueError(str(e)) from e


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)


class ParameterConfig(_Record):
    ref: str | None = None
    type: Any = None
    value: Any = None
    optional: bool = False
    name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_optional(cls, data: Any) -> Any:
        # a parameter carrying a value is optional unless told otherwise
        if isinstance(data, dict) and "optional" not in data:
            data = {**data, "optional": "value" in data}
        return data

    @field_validator("type")
    @classmethod
    def _load_type(cls, value: Any) -> Any:
        return None if value is None else _to_type(value)


class MutatorConfig(_Record):
    type: Any
    name: str

    @field_validator("type")
    @classmethod
    def _load_type(cls, value: Any) -> Any:
        return _to_type(value)


class DefinitionConfig(_Record):
    concrete: Any
    parameters: tuple[ParameterConfig, ...] = ()
    mutators: tuple[MutatorConfig, ...] = ()
    autowire: frozenset[Autowire] = AUTOWIRE_ALL
    name: str | None = None
    candidate: bool = True

    @field_validator("concrete")
    @classmethod
    def _load_concrete(cls, value: Any) -> Any:
        return _to_type(value)

    @field_validator("autowire", mode="before")
    @classmethod
    def _parse_autowire(cls, value: Any) -> frozenset[Autowire]:
        try:
            return parse_autowire(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def _check_against_concrete(self) -> DefinitionConfig:
        check_definition(
            self.concrete,
            [Parameter(name=p.name) for p in self.parameters],
            [Mutator(type=m.type, name=m.name) for m in self.mutators],
        )
        return self


class ContainerConfig(_Record):
    definitions: tuple[DefinitionConfig, ...] = ()
    discovery: bool = True
    assembler: Any = None
    reflector: Any = None

    @field_validator("assembler")
    @classmethod
    def _check_assembler(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, Assembler):
            msg = "assembler must provide get_instance(concrete, arguments)"
            raise ValueError(msg)
        return value

    @field_validator("reflector")
    @classmethod
    def _check_reflector(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, TypeReflector):
            msg = "reflector must provide describe_constructor(cls) and describe_mutators(cls)"
            raise ValueError(msg)
        return value
