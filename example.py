import enum
import logging
import typing
from datetime import datetime

import attr
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from entity_mapper import CascadeStyle, Entity, Key, Session


class Status(enum.Enum):
    NEW = "NEW"
    OLD = "OLD"


class Note(Entity):
    codigo: Key[int] = 0
    content: str = ""
    created: typing.Optional[datetime] = None


class Post(Entity):
    id: int = 0
    author: typing.Optional["Author"] = None
    content: str = ""
    status: Status = Status.NEW


class Author(Entity):
    id: int = 0
    username: str = ""
    posts: typing.List[Post] = attr.Factory(list)


logging.basicConfig(level=logging.DEBUG)

engine = create_engine("sqlite://", poolclass=StaticPool)
with engine.begin() as connection:
    connection.execute(text('CREATE TABLE "Notes" (codigo INTEGER PRIMARY KEY, content TEXT, created DATETIME)'))
    connection.execute(text('CREATE TABLE "Authors" (id INTEGER PRIMARY KEY, username TEXT)'))
    connection.execute(text('CREATE TABLE "Posts" (id INTEGER PRIMARY KEY, "authorId" INTEGER, content TEXT, status TEXT)'))


with Session(engine) as session:
    note = Note(content="hello", created=datetime.now())
    session.insert(note)
    session.submit()

    note.content = "bye"
    session.update(note)
    session.submit()
    print(session.find_by_key(Note, note.codigo))

    author = Author(username="Seba")
    author.posts.append(Post(author=author, content="first"))
    author.posts.append(Post(author=author, content="second", status=Status.OLD))
    session.insert(author, CascadeStyle.COLLECTION)
    session.submit()
    print(session.find(Post, lambda post: post.status is Status.OLD))

    session.delete(author, CascadeStyle.COLLECTION)
    session.delete(note)
    session.submit()
    print(session.find(Post), session.find_by_key(Note, note.codigo))
