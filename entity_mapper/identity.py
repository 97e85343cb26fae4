"""Recovering the key a backend assigned to the row just inserted.

Scalar function strategies ask the connection for the identity of its own last
insert. ``LatestKeyIdentity`` reads the highest key of the table instead, which
is only correct while no other writer inserts into the same table concurrently.
"""
import abc
import typing

import attr

from entity_mapper.exceptions import IdentityRetrievalError
from entity_mapper.metadata import TypeMetadata
from entity_mapper.statements import IDENTITY, Quote, Statement, no_quote


class IdentityStrategy(abc.ABC):
    @abc.abstractmethod
    def statement(self, metadata: TypeMetadata, quote: Quote = no_quote) -> Statement:
        pass

    def parse(self, metadata: TypeMetadata, value: typing.Any) -> int:
        try:
            return int(str(value))
        except (TypeError, ValueError) as error:
            raise IdentityRetrievalError(metadata.table_name, value) from error


@attr.s(auto_attribs=True, frozen=True)
class ScalarFunctionIdentity(IdentityStrategy):
    expression: str

    def statement(self, metadata: TypeMetadata, quote: Quote = no_quote) -> Statement:
        return Statement(IDENTITY, metadata.table_name, f"SELECT {self.expression}")


@attr.s(auto_attribs=True, frozen=True)
class LatestKeyIdentity(IdentityStrategy):
    top: bool = False

    def statement(self, metadata: TypeMetadata, quote: Quote = no_quote) -> Statement:
        key = quote(metadata.primary_key_name)
        table = quote(metadata.table_name)
        if self.top:
            sql = f"SELECT TOP 1 {key} FROM {table} ORDER BY {key} DESC"
        else:
            sql = f"SELECT {key} FROM {table} ORDER BY {key} DESC LIMIT 1"
        return Statement(IDENTITY, metadata.table_name, sql)


mapping: typing.Dict[str, IdentityStrategy] = {
    "sqlite": ScalarFunctionIdentity("last_insert_rowid()"),
    "mssql": ScalarFunctionIdentity("CAST(SCOPE_IDENTITY() AS int)"),
    "mysql": ScalarFunctionIdentity("LAST_INSERT_ID()"),
    "mariadb": ScalarFunctionIdentity("LAST_INSERT_ID()"),
    "postgresql": ScalarFunctionIdentity("lastval()"),
    "access": LatestKeyIdentity(top=True),
}


def for_dialect(dialect_name: str) -> IdentityStrategy:
    return mapping.get(dialect_name, LatestKeyIdentity())
