import abc
import typing

from entity_mapper.metadata import TypeMetadata
from entity_mapper.statements import Statement


Row = typing.Mapping[str, typing.Any]


class Transaction(abc.ABC):
    @property
    @abc.abstractmethod
    def is_active(self) -> bool:
        pass

    @abc.abstractmethod
    def commit(self) -> None:
        pass

    @abc.abstractmethod
    def rollback(self) -> None:
        pass

    @abc.abstractmethod
    def close(self) -> None:
        """Dispose the transaction, rolling it back when it is still active."""


class Connection(abc.ABC):
    """What the mapper needs from a database driver.

    Statements run inside whatever transaction the connection currently has
    open; ``execute`` raises ``StatementError`` when the backend rejects one.
    """

    @property
    @abc.abstractmethod
    def dialect_name(self) -> str:
        pass

    @abc.abstractmethod
    def begin(self) -> Transaction:
        pass

    @abc.abstractmethod
    def execute(self, statement: Statement) -> int:
        pass

    @abc.abstractmethod
    def execute_scalar(self, statement: Statement) -> typing.Any:
        pass

    @abc.abstractmethod
    def query(self, statement: Statement, metadata: TypeMetadata) -> typing.List[Row]:
        pass

    @abc.abstractmethod
    def close(self) -> None:
        pass

    def quote(self, identifier: str) -> str:
        return identifier
