import enum
import logging
import typing

from entity_mapper.connection import Connection
from entity_mapper.exceptions import MissingKeyError
from entity_mapper.identity import IdentityStrategy
from entity_mapper.metadata import FieldDescriptor, FieldKind, TypeMetadata
from entity_mapper.registry import Registry
from entity_mapper.statements import Parameter, Statement, StatementBuilder


logger = logging.getLogger(__name__)


class CascadeStyle(enum.Enum):
    NONE = "none"
    SINGLE = "single"
    COLLECTION = "collection"
    ALL = "all"

    @property
    def follows_relations(self) -> bool:
        return self in (CascadeStyle.SINGLE, CascadeStyle.ALL)

    @property
    def follows_collections(self) -> bool:
        return self in (CascadeStyle.COLLECTION, CascadeStyle.ALL)


# objects already handled by the running operation, keyed by identity
Visited = typing.Dict[int, typing.Any]
Operation = typing.Callable[[typing.Any, CascadeStyle, Visited], typing.Any]


class Cascade:
    """Applies insert, update or delete to an object and, per cascade style, to the objects it references."""

    def __init__(
        self, connection: Connection, registry: Registry, builder: StatementBuilder, identity: IdentityStrategy
    ) -> None:
        self._connection = connection
        self._registry = registry
        self._builder = builder
        self._identity = identity

    def insert(self, instance: typing.Any, style: CascadeStyle) -> typing.Any:
        if instance is None:
            return None
        return self._insert(instance, style, {})

    def update(self, instance: typing.Any, style: CascadeStyle) -> None:
        if instance is not None:
            self._update(instance, style, {})

    def delete(self, instance: typing.Any, style: CascadeStyle) -> None:
        if instance is not None:
            self._delete(instance, style, {})

    def _insert(self, instance: typing.Any, style: CascadeStyle, visited: Visited) -> typing.Any:
        metadata = self._registry.resolve(type(instance))
        primary_key = metadata.require_primary_key()
        visited[id(instance)] = instance

        columns = self._gather_columns(metadata, instance, style, visited, self._insert)
        self._execute(self._builder.insert(metadata, columns))

        identity_statement = self._identity.statement(metadata, self._connection.quote)
        key = self._identity.parse(metadata, self._connection.execute_scalar(identity_statement))
        setattr(instance, primary_key.name, key)
        logger.debug("Inserted %s with %s = %r", metadata.table_name, primary_key.name, key)

        if style.follows_collections:
            self._cascade_collections(metadata, instance, style, visited, self._insert)
        return key

    def _update(self, instance: typing.Any, style: CascadeStyle, visited: Visited) -> None:
        metadata = self._registry.resolve(type(instance))
        key = self._require_key(metadata, instance)
        visited[id(instance)] = instance

        columns = self._gather_columns(metadata, instance, style, visited, self._update)
        if columns:
            self._execute(self._builder.update(metadata, key, columns))
        else:
            logger.debug("Nothing to update on %s %r", metadata.table_name, key)

        if style.follows_collections:
            self._cascade_collections(metadata, instance, style, visited, self._update)

    def _delete(self, instance: typing.Any, style: CascadeStyle, visited: Visited) -> None:
        metadata = self._registry.resolve(type(instance))
        key = self._require_key(metadata, instance)
        visited[id(instance)] = instance

        if style.follows_collections:
            self._cascade_collections(metadata, instance, style, visited, self._delete)

        self._execute(self._builder.delete(metadata, key))

        if style.follows_relations:
            for field in metadata.relations:
                related = getattr(instance, field.name)
                if related is not None and id(related) not in visited:
                    self._delete(related, style, visited)

    def _gather_columns(
        self,
        metadata: TypeMetadata,
        instance: typing.Any,
        style: CascadeStyle,
        visited: Visited,
        operation: Operation,
    ) -> typing.List[Parameter]:
        columns = []
        for field in metadata.fields:
            if field.kind is FieldKind.SCALAR:
                columns.append(Parameter.of(field, instance))
            elif field.kind is FieldKind.RELATION:
                foreign_key = self._link(field, getattr(instance, field.name), style, visited, operation)
                if foreign_key is not None:
                    columns.append(foreign_key)
        return columns

    def _link(
        self,
        field: FieldDescriptor,
        related: typing.Any,
        style: CascadeStyle,
        visited: Visited,
        operation: Operation,
    ) -> typing.Optional[Parameter]:
        if related is None:
            return None
        if id(related) not in visited:
            if not style.follows_relations:
                return None
            operation(related, style, visited)

        related_metadata = self._registry.resolve(type(related))
        related_key = related_metadata.require_primary_key()
        key = getattr(related, related_key.name)
        if related_key.is_unset(key):
            # the related object is still waiting for its own insert higher up the graph
            return None
        return Parameter(field.foreign_key_name, key, related_key.type)

    def _cascade_collections(
        self,
        metadata: TypeMetadata,
        instance: typing.Any,
        style: CascadeStyle,
        visited: Visited,
        operation: Operation,
    ) -> None:
        for field in metadata.collections:
            for child in getattr(instance, field.name) or ():
                if id(child) not in visited:
                    operation(child, style, visited)

    def _require_key(self, metadata: TypeMetadata, instance: typing.Any) -> typing.Any:
        primary_key = metadata.require_primary_key()
        key = getattr(instance, primary_key.name)
        if primary_key.is_unset(key):
            raise MissingKeyError(metadata.type, primary_key.name)
        return key

    def _execute(self, statement: Statement) -> int:
        logger.debug("%s %s", statement.sql, statement.params)
        return self._connection.execute(statement)
