import logging
import typing

from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Connection as SaConnection, Engine, Result
from sqlalchemy.exc import DBAPIError
from sqlalchemy.sql.expression import Executable
from sqlalchemy.types import NullType

from entity_mapper.config import engine_options, resolve_connection_string
from entity_mapper.connection import Connection, Row, Transaction
from entity_mapper.exceptions import StatementError
from entity_mapper.metadata import TypeMetadata
from entity_mapper.statements import Statement
from entity_mapper.storages.sqlalchemy import native_type_to_column
from entity_mapper.types import to_storage


logger = logging.getLogger(__name__)


class SqlAlchemyTransaction(Transaction):
    def __init__(self, transaction: typing.Any) -> None:
        self._transaction = transaction

    @property
    def is_active(self) -> bool:
        return self._transaction.is_active

    def commit(self) -> None:
        self._transaction.commit()

    def rollback(self) -> None:
        self._transaction.rollback()

    def close(self) -> None:
        self._transaction.close()


class SqlAlchemyConnection(Connection):
    def __init__(self, engine: Engine, dispose_engine: bool = False) -> None:
        self._engine = engine
        self._dispose_engine = dispose_engine
        self._connection = engine.connect()

    @property
    def sa_connection(self) -> SaConnection:
        return self._connection

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    def begin(self) -> SqlAlchemyTransaction:
        # reads outside of a transaction make SQLAlchemy begin one on its own, adopt it
        if self._connection.in_transaction():
            return SqlAlchemyTransaction(self._connection.get_transaction())
        return SqlAlchemyTransaction(self._connection.begin())

    def execute(self, statement: Statement) -> int:
        clause = text(statement.sql).bindparams(
            *(
                bindparam(
                    parameter.name, to_storage(parameter.value), type_=native_type_to_column.convert(parameter.type)
                )
                for parameter in statement.parameters
            )
        )
        return self._run(statement, clause).rowcount

    def execute_scalar(self, statement: Statement) -> typing.Any:
        return self._run(statement, text(statement.sql)).scalar()

    def query(self, statement: Statement, metadata: TypeMetadata) -> typing.List[Row]:
        column_types = {
            field.name: native_type_to_column.convert(field.type) for field in metadata.columns
        }
        clause = text(statement.sql).columns(
            **{name: column_type for name, column_type in column_types.items() if column_type is not NullType}
        )
        return [dict(row) for row in self._run(statement, clause).mappings()]

    def quote(self, identifier: str) -> str:
        return self._engine.dialect.identifier_preparer.quote(identifier)

    def close(self) -> None:
        self._connection.close()
        if self._dispose_engine:
            self._engine.dispose()

    def _run(self, statement: Statement, clause: Executable) -> Result:
        try:
            return self._connection.execute(clause)
        except DBAPIError as error:
            logger.debug("%s failed on %s: %s", statement.operation, statement.table, error)
            raise StatementError(statement.operation, statement.table) from error


def connect(bind: typing.Union[Engine, str]) -> SqlAlchemyConnection:
    if isinstance(bind, Engine):
        return SqlAlchemyConnection(bind)
    url = resolve_connection_string(bind)
    return SqlAlchemyConnection(create_engine(url, **engine_options()), dispose_engine=True)
