import typing
from collections import defaultdict

import pytest
from _pytest.config.argparsing import Parser

from entity_mapper import Session
from entity_mapper.connection import Connection, Row, Transaction
from entity_mapper.exceptions import StatementError
from entity_mapper.metadata import TypeMetadata
from entity_mapper.statements import IDENTITY, Statement


def pytest_addoption(parser: Parser) -> None:
    parser.addoption("--entity-mapper-url", action="store", default=None)


class RecordingTransaction(Transaction):
    def __init__(self, connection: "RecordingConnection") -> None:
        self._connection = connection
        self.state = "active"

    @property
    def is_active(self) -> bool:
        return self.state == "active"

    def commit(self) -> None:
        if self._connection.commit_error:
            raise self._connection.commit_error
        self.state = "committed"
        self._connection.events.append("commit")

    def rollback(self) -> None:
        self.state = "rolled back"
        self._connection.events.append("rollback")

    def close(self) -> None:
        if self.is_active:
            self.rollback()


class RecordingConnection(Connection):
    dialect_name = "sqlite"

    def __init__(self) -> None:
        self.statements: typing.List[Statement] = []
        self.events: typing.List[str] = []
        self.rows: typing.DefaultDict[str, typing.List[Row]] = defaultdict(list)
        self.failing_tables: typing.Set[str] = set()
        self.identities: typing.DefaultDict[str, int] = defaultdict(int)
        self.identity_value: typing.Any = None
        self.commit_error: typing.Optional[Exception] = None
        self.begin_error: typing.Optional[Exception] = None

    @property
    def executed(self) -> typing.List[Statement]:
        return [statement for statement in self.statements if statement.operation != IDENTITY]

    @property
    def operations(self) -> typing.List[typing.Tuple[str, str]]:
        return [(statement.operation, statement.table) for statement in self.executed]

    def begin(self) -> RecordingTransaction:
        if self.begin_error:
            raise self.begin_error
        self.events.append("begin")
        return RecordingTransaction(self)

    def execute(self, statement: Statement) -> int:
        if statement.table in self.failing_tables:
            raise StatementError(statement.operation, statement.table)
        self.statements.append(statement)
        return 1

    def execute_scalar(self, statement: Statement) -> typing.Any:
        self.statements.append(statement)
        if self.identity_value is not None:
            return self.identity_value
        self.identities[statement.table] += 1
        return self.identities[statement.table]

    def query(self, statement: Statement, metadata: TypeMetadata) -> typing.List[Row]:
        self.statements.append(statement)
        return list(self.rows[metadata.table_name])

    def close(self) -> None:
        self.events.append("close")


@pytest.fixture()
def connection() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture()
def session(connection: RecordingConnection) -> typing.Generator[Session, None, None]:
    session = Session(connection)
    yield session
    session.close()
