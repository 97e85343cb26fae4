import logging
import typing

import attr

from entity_mapper.connection import Connection, Row
from entity_mapper.metadata import FieldKind, TypeMetadata
from entity_mapper.registry import Registry
from entity_mapper.statements import Statement, StatementBuilder
from entity_mapper.types import from_storage


logger = logging.getLogger(__name__)

T = typing.TypeVar("T")


def materialize(metadata: TypeMetadata, row: Row) -> typing.Any:
    by_name = {name.lower(): value for name, value in row.items()}
    descriptors = {descriptor.name: descriptor for descriptor in metadata.columns}

    kwargs = {}
    for field in attr.fields(metadata.type):
        if not field.init:
            continue
        descriptor = descriptors.get(field.name)
        column = field.name.lower()
        if descriptor is not None and descriptor.kind is FieldKind.SCALAR and column in by_name:
            kwargs[field.name.lstrip("_")] = from_storage(by_name[column], descriptor)
        elif field.default is attr.NOTHING:
            kwargs[field.name.lstrip("_")] = None
    return metadata.type(**kwargs)


class Finder:
    def __init__(self, connection: Connection, registry: Registry, builder: StatementBuilder) -> None:
        self._connection = connection
        self._registry = registry
        self._builder = builder

    def find(
        self, entity_type: typing.Type[T], predicate: typing.Optional[typing.Callable[[T], bool]] = None
    ) -> typing.List[T]:
        # whole table is fetched and filtered here, there is no query translation
        metadata = self._registry.resolve(entity_type)
        instances = [materialize(metadata, row) for row in self._query(metadata, self._builder.select(metadata))]
        if predicate is None:
            return instances
        return [instance for instance in instances if predicate(instance)]

    def find_by_key(
        self, entity_type: typing.Type[T], key: typing.Any, key_name: typing.Optional[str] = None
    ) -> typing.Optional[T]:
        if key is None:
            return None
        metadata = self._registry.resolve(entity_type)
        rows = self._query(metadata, self._builder.select(metadata, key, key_name))
        if not rows:
            return None
        return materialize(metadata, rows[0])

    def _query(self, metadata: TypeMetadata, statement: Statement) -> typing.List[Row]:
        logger.debug("%s", statement.sql)
        return self._connection.query(statement, metadata)
