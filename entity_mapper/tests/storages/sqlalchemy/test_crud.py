import typing
from datetime import date, datetime

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from entity_mapper import Entity, Key, MissingKeyError, Session, StatementError


T0 = datetime(2024, 1, 1, 9, 30)


class Note(Entity):
    codigo: Key[int] = 0
    content: str = ""
    created: typing.Optional[datetime] = None
    modified: typing.Optional[datetime] = None


class Post(Entity):
    id: int = 0
    content: str = ""


class Event(Entity):
    id: int = 0
    day: typing.Optional[date] = None


class Ghost(Entity):
    id: int = 0
    name: str = ""


def test_note_lifecycle(session: Session) -> None:
    note = Note(content="hello", created=T0, modified=T0)

    key = session.insert(note)
    session.submit()

    assert key == note.codigo
    assert key
    assert session.find_by_key(Note, key) == Note(codigo=key, content="hello", created=T0, modified=T0)

    note.content = "bye"
    session.update(note)
    session.submit()

    assert session.find_by_key(Note, key) == Note(codigo=key, content="bye", created=T0, modified=T0)

    session.delete(note)
    session.submit()

    assert session.find_by_key(Note, key) is None


def test_uncommitted_rows_are_visible_inside_the_session(session: Session) -> None:
    note = Note(content="Test content 'n' escapes!", created=T0, modified=T0)
    session.insert(note)

    assert session.find_by_key(Note, note.codigo) == note


def test_consecutive_inserts_get_distinct_keys(session: Session) -> None:
    keys = [session.insert(Note(content=str(index))) for index in range(3)]
    session.submit()

    assert len(set(keys)) == 3
    assert sorted(note.content for note in session.find(Note)) == ["0", "1", "2"]


def test_find_filters_in_memory(session: Session) -> None:
    session.insert(Post(content="Dummy post"))
    session.insert(Post(content="Another post"))
    session.submit()

    (found,) = session.find(Post, lambda post: post.content == "Dummy post")

    assert found.content == "Dummy post"
    assert found.id > 0


def test_find_by_key_with_key_name(session: Session) -> None:
    session.insert(Post(content="by content"))

    found = session.find_by_key(Post, "by content", key_name="content")

    assert found is not None
    assert found.id > 0


def test_close_rolls_back_unsubmitted_work(engine: Engine, session: Session) -> None:
    note = Note(content="pending")
    session.insert(note)
    session.close()

    with Session(engine) as other:
        assert other.find_by_key(Note, note.codigo) is None


def test_rollback_discards_work_and_session_continues(session: Session) -> None:
    discarded = Note(content="discarded")
    session.insert(discarded)
    session.rollback()

    kept = Note(content="kept")
    session.insert(kept)
    session.submit()

    assert [note.content for note in session.find(Note)] == ["kept"]


def test_failed_statement_names_operation_and_table(session: Session) -> None:
    with pytest.raises(StatementError) as error:
        session.insert(Ghost(name="nowhere"))

    assert (error.value.operation, error.value.table) == ("insert", "Ghosts")
    assert isinstance(error.value.__cause__, DBAPIError)


def test_delete_without_key_touches_nothing(session: Session) -> None:
    session.insert(Note(content="stays"))

    with pytest.raises(MissingKeyError):
        session.delete(Note(content="stays"))
    session.submit()

    assert len(session.find(Note)) == 1


def test_find_by_date_column(session: Session) -> None:
    event = Event(day=date(2024, 1, 1))
    session.insert(event)
    session.insert(Event(day=date(2024, 1, 2)))
    session.submit()

    assert session.find_by_key(Event, date(2024, 1, 1), key_name="day") == event
