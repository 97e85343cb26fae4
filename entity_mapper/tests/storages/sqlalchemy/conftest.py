from typing import Generator

import pytest
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

from entity_mapper import Session


@pytest.fixture()
def sa_metadata() -> MetaData:
    metadata = MetaData()
    Table(
        "Notes",
        metadata,
        Column("codigo", Integer, primary_key=True),
        Column("content", String(255)),
        Column("created", DateTime),
        Column("modified", DateTime),
    )
    Table("Authors", metadata, Column("id", Integer, primary_key=True), Column("username", String(255)))
    Table(
        "Posts",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("authorId", Integer, ForeignKey("Authors.id")),
        Column("content", String(255)),
    )
    Table("Events", metadata, Column("id", Integer, primary_key=True), Column("day", Date))
    return metadata


@pytest.fixture()
def tables(sa_metadata: MetaData, engine: Engine) -> Generator[None, None, None]:
    sa_metadata.drop_all(engine)
    sa_metadata.create_all(engine)
    yield
    sa_metadata.drop_all(engine)


@pytest.fixture()
def session(engine: Engine, tables: None) -> Generator[Session, None, None]:
    session = Session(engine)
    yield session
    session.close()
