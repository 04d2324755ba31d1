import logging
from typing import Protocol

import pytest

from wiredef import AUTOWIRE_NONE, Autowire, Container, DefinitionMissing, Mutator


class Logger: ...


class Cache: ...


class Service:
    def __init__(self):
        self.calls = []

    def set_logger(self, logger: Logger):
        self.calls.append(("logger", logger))

    def set_cache(self, cache: Cache):
        self.calls.append(("cache", cache))

    def set_label(self, label: str):
        self.calls.append(("label", label))

    def set_many(self, first: Logger, second: Cache):
        self.calls.append(("many", first, second))


def test_mutators_run_in_declaration_order():
    c = Container(discovery=False)
    c.register(Logger)
    c.register(Cache)
    c.register(Service, mutators=[Mutator(type=Cache, name="set_cache"), Mutator(type=Logger, name="set_logger")])

    svc = c.get(Service)

    assert [call[0] for call in svc.calls] == ["cache", "logger"]
    assert isinstance(svc.calls[0][1], Cache)
    assert isinstance(svc.calls[1][1], Logger)


def test_discovered_setters_follow_class_body_order():
    c = Container()

    svc = c.get(Service)

    # set_label takes a builtin and set_many takes two arguments: neither is a mutator
    assert [call[0] for call in svc.calls] == ["logger", "cache"]


def test_mutator_without_definition_is_skipped_with_warning(caplog):
    c = Container(discovery=False)
    c.register(Cache)
    c.register(Service, mutators=[Mutator(type=Logger, name="set_logger"), Mutator(type=Cache, name="set_cache")])

    with caplog.at_level(logging.WARNING, logger="wiredef"):
        svc = c.get(Service)

    assert [call[0] for call in svc.calls] == ["cache"]
    assert "Skipping mutator" in caplog.text
    assert "set_logger" in caplog.text


def test_mutator_whose_discovery_fails_is_skipped(caplog):
    class Sink(Protocol):
        def write(self, data: bytes) -> None: ...

    class Writer:
        def set_sink(self, sink: Sink):
            self.sink = sink

    c = Container()
    c.register(Writer, mutators=[Mutator(type=Sink, name="set_sink")])

    with caplog.at_level(logging.WARNING, logger="wiredef"):
        writer = c.get(Writer)

    assert not hasattr(writer, "sink")
    assert "set_sink" in caplog.text


def test_mutators_disabled_by_policy_are_not_called():
    c = Container(discovery=False)
    c.register(Logger)
    c.register(Service, mutators=[Mutator(type=Logger, name="set_logger")], autowire={Autowire.CONSTRUCTOR})

    assert c.get(Service).calls == []


def test_mutator_argument_gets_its_own_mutators():
    class Inner:
        def __init__(self):
            self.logger = None

        def set_logger(self, logger: Logger):
            self.logger = logger

    class Outer:
        def set_inner(self, inner: Inner):
            self.inner = inner

    c = Container()

    outer = c.get(Outer)

    assert isinstance(outer.inner, Inner)
    assert isinstance(outer.inner.logger, Logger)


def test_inject_runs_mutators_on_existing_instance():
    c = Container(discovery=False)
    c.register(Logger)
    c.register(Service, mutators=[Mutator(type=Logger, name="set_logger")])

    existing = Service()
    returned = c.inject(existing)

    assert returned is existing
    assert [call[0] for call in existing.calls] == ["logger"]


def test_inject_discovers_definition_for_instance_type():
    c = Container()

    existing = Service()
    c.inject(existing)

    assert [call[0] for call in existing.calls] == ["logger", "cache"]
    assert c.definitions.has_type(Service)


def test_inject_respects_mutator_policy():
    c = Container(discovery=False)
    c.register(Logger)
    c.register(Service, mutators=[Mutator(type=Logger, name="set_logger")], autowire=AUTOWIRE_NONE)

    existing = Service()
    c.inject(existing)

    assert existing.calls == []


def test_inject_without_definition_raises():
    c = Container(discovery=False)

    with pytest.raises(DefinitionMissing):
        c.inject(Service())
