import typing

import attr

from entity_mapper.exceptions import MissingKeyError
from entity_mapper.metadata import FieldDescriptor, TypeMetadata
from entity_mapper.types import render_literal, to_storage


INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
SELECT = "select"
IDENTITY = "identity"

Quote = typing.Callable[[str], str]


def no_quote(identifier: str) -> str:
    return identifier


@attr.s(auto_attribs=True, frozen=True)
class Parameter:
    name: str
    value: typing.Any
    type: typing.Any = None

    @classmethod
    def of(cls, field: FieldDescriptor, instance: typing.Any) -> "Parameter":
        return cls(field.name, getattr(instance, field.name), field.type)


@attr.s(auto_attribs=True, frozen=True)
class Statement:
    operation: str
    table: str
    sql: str
    parameters: typing.Tuple[Parameter, ...] = ()

    @property
    def params(self) -> typing.Dict[str, typing.Any]:
        return {parameter.name: to_storage(parameter.value) for parameter in self.parameters}


class StatementBuilder:
    def __init__(self, quote: Quote = no_quote) -> None:
        self._quote = quote

    def insert(self, metadata: TypeMetadata, columns: typing.Sequence[Parameter]) -> Statement:
        table = self._quote(metadata.table_name)
        if not columns:
            return Statement(INSERT, metadata.table_name, f"INSERT INTO {table} DEFAULT VALUES")

        names = ", ".join(self._quote(column.name) for column in columns)
        values = ", ".join(f":{column.name}" for column in columns)
        return Statement(
            INSERT, metadata.table_name, f"INSERT INTO {table} ({names}) VALUES ({values})", tuple(columns)
        )

    def update(self, metadata: TypeMetadata, key: typing.Any, columns: typing.Sequence[Parameter]) -> Statement:
        assignments = ", ".join(f"{self._quote(column.name)} = :{column.name}" for column in columns)
        return Statement(
            UPDATE,
            metadata.table_name,
            f"UPDATE {self._quote(metadata.table_name)} SET {assignments} WHERE {self._where(metadata, key)}",
            tuple(columns),
        )

    def delete(self, metadata: TypeMetadata, key: typing.Any) -> Statement:
        return Statement(
            DELETE,
            metadata.table_name,
            f"DELETE FROM {self._quote(metadata.table_name)} WHERE {self._where(metadata, key)}",
        )

    def select(
        self, metadata: TypeMetadata, key: typing.Any = None, key_name: typing.Optional[str] = None
    ) -> Statement:
        sql = f"SELECT * FROM {self._quote(metadata.table_name)}"
        if key is not None:
            sql = f"{sql} WHERE {self._quote(key_name or metadata.primary_key_name)} = {render_literal(key)}"
        return Statement(SELECT, metadata.table_name, sql)

    def _where(self, metadata: TypeMetadata, key: typing.Any) -> str:
        # keys are trusted scalars and rendered inline, only column values are bound
        primary_key = metadata.require_primary_key()
        if primary_key.is_unset(key):
            raise MissingKeyError(metadata.type, primary_key.name)
        return f"{self._quote(primary_key.name)} = {render_literal(key)}"
