from __future__ import annotations

from models.db_storage import DBStorage
from models.user import User


def test_reload_disposes_previous_engine(monkeypatch) -> None:
    db = DBStorage()
    db.reload("sqlite://")
    first = db._DBStorage__engine

    disposed = []
    monkeypatch.setattr(type(first), "dispose", lambda self, close=True: disposed.append(self))
    db.reload("sqlite://")

    assert disposed == [first]
    assert db._DBStorage__engine is not first
    db.close()


def test_reload_starts_from_empty_in_memory_database() -> None:
    db = DBStorage()
    db.reload("sqlite://")
    db.new(User(email="a@x.com", provider="local"))
    db.save()
    assert db.count(User) == 1

    db.reload("sqlite://")
    assert db.count(User) == 0
    db.close()
