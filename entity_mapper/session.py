import logging
import typing

from sqlalchemy.engine import Engine

from entity_mapper.cascade import Cascade, CascadeStyle
from entity_mapper.connection import Connection, Transaction
from entity_mapper.exceptions import SessionClosedError
from entity_mapper.finder import Finder
from entity_mapper import identity as identities
from entity_mapper.identity import IdentityStrategy
from entity_mapper.registry import Registry, default_registry
from entity_mapper.statements import StatementBuilder
from entity_mapper.storages.sqlalchemy import connect


logger = logging.getLogger(__name__)

T = typing.TypeVar("T")
Bind = typing.Union[Connection, Engine, str]


class Session:
    """One connection and the transaction currently open on it.

    Mutations join the open transaction, beginning a new one after the previous was
    submitted or rolled back. Nothing is written permanently until ``submit``; closing
    the session rolls back whatever was not submitted. Not safe for use from several
    threads at once, open one session per thread instead.
    """

    def __init__(
        self,
        bind: Bind,
        registry: typing.Optional[Registry] = None,
        identity: typing.Optional[IdentityStrategy] = None,
    ) -> None:
        self._connection = bind if isinstance(bind, Connection) else connect(bind)
        self._registry = registry or default_registry
        builder = StatementBuilder(self._connection.quote)
        identity = identity or identities.for_dialect(self._connection.dialect_name)
        self._cascade = Cascade(self._connection, self._registry, builder, identity)
        self._finder = Finder(self._connection, self._registry, builder)
        self._closed = False
        try:
            self._transaction: typing.Optional[Transaction] = self._connection.begin()
        except Exception:
            self._connection.close()
            raise

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: typing.Any) -> None:
        self.close()

    @property
    def connection(self) -> Connection:
        self._ensure_open()
        return self._connection

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def insert(self, instance: typing.Any, cascade: CascadeStyle = CascadeStyle.ALL) -> typing.Any:
        self._begin()
        return self._cascade.insert(instance, cascade)

    def update(self, instance: typing.Any, cascade: CascadeStyle = CascadeStyle.NONE) -> None:
        self._begin()
        self._cascade.update(instance, cascade)

    def delete(self, instance: typing.Any, cascade: CascadeStyle = CascadeStyle.NONE) -> None:
        self._begin()
        self._cascade.delete(instance, cascade)

    def find(
        self, entity_type: typing.Type[T], predicate: typing.Optional[typing.Callable[[T], bool]] = None
    ) -> typing.List[T]:
        self._ensure_open()
        return self._finder.find(entity_type, predicate)

    def find_by_key(
        self, entity_type: typing.Type[T], key: typing.Any, key_name: typing.Optional[str] = None
    ) -> typing.Optional[T]:
        self._ensure_open()
        return self._finder.find_by_key(entity_type, key, key_name)

    def submit(self) -> bool:
        self._ensure_open()
        if self._transaction is None:
            logger.debug("Nothing to submit")
            return False

        transaction, self._transaction = self._transaction, None
        try:
            transaction.commit()
        except Exception:
            logger.warning("Commit failed, rolling back", exc_info=True)
            transaction.rollback()
            raise
        finally:
            transaction.close()
        logger.info("Changes submitted")
        return True

    def rollback(self) -> None:
        self._ensure_open()
        if self._transaction is None:
            return
        transaction, self._transaction = self._transaction, None
        try:
            transaction.rollback()
        finally:
            transaction.close()
        logger.info("Changes rolled back")

    def close(self) -> None:
        if self._closed:
            return
        try:
            if self._transaction is not None:
                self._transaction.close()
                self._transaction = None
        finally:
            self._connection.close()
            self._closed = True
        logger.info("Session closed")

    def _begin(self) -> None:
        self._ensure_open()
        if self._transaction is None:
            self._transaction = self._connection.begin()
            logger.debug("Transaction begun")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session is closed")
