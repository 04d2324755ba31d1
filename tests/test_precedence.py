import unittest

import pytest

from wiredef import Container, MalformedParameter, Parameter


class TestResolutionPrecedence(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container(discovery=False)

    def test_reference_wins_over_type(self):
        class DB: ...

        class AnotherDB: ...

        class Repo:
            def __init__(self, db):
                self.db = db

        self.cont.register(DB)
        self.cont.register(AnotherDB, name="db")
        self.cont.register(Repo, parameters=[Parameter(ref="db", type=DB)])

        obj = self.cont.get(Repo)

        assert isinstance(obj.db, AnotherDB)

    def test_reference_wins_over_default_value(self):
        class DB: ...

        class Repo:
            def __init__(self, db=None):
                self.db = db

        self.cont.register(DB, name="db")
        self.cont.register(Repo, parameters=[Parameter(ref="db", value="unused", optional=True)])

        obj = self.cont.get(Repo)

        assert isinstance(obj.db, DB)

    def test_type_wins_over_default_value(self):
        class DB: ...

        class Repo:
            def __init__(self, db=None):
                self.db = db

        self.cont.register(DB)
        self.cont.register(Repo, parameters=[Parameter(type=DB, value="unused", optional=True)])

        obj = self.cont.get(Repo)

        assert isinstance(obj.db, DB)

    def test_default_value_used_when_neither_reference_nor_type(self):
        class Repo:
            def __init__(self, port):
                self.port = port

        self.cont.register(Repo, parameters=[Parameter(value=1234, optional=True)])

        obj = self.cont.get(Repo)

        assert obj.port == 1234

    def test_value_is_ignored_unless_optional(self):
        class Repo:
            def __init__(self, port):
                self.port = port

        self.cont.register(Repo, parameters=[Parameter(value=1234)])

        with pytest.raises(MalformedParameter):
            self.cont.get(Repo)

    def test_reference_bypasses_registration_by_type_for_same_class(self):
        class Repo: ...

        class NamedRepo(Repo):
            def __init__(self, label: str = ""):
                super().__init__()
                self.label = label

        class Service:
            def __init__(self, repo):
                self.repo = repo

        self.cont.register(Repo)
        self.cont.register(NamedRepo, name="repo", parameters=[Parameter(value="named", optional=True)])
        self.cont.register(Service, parameters=[Parameter(ref="repo", type=Repo)])

        obj = self.cont.get(Service)

        assert type(obj.repo) is NamedRepo
        assert obj.repo.label == "named"
