import collections.abc
import enum
import inspect
import types
import typing
import uuid
from datetime import date, datetime, time
from decimal import Decimal

import attr

from entity_mapper.entity import FOREIGN_KEY, Key
from entity_mapper.exceptions import MetadataError, NoPrimaryKeyError


DEFAULT_KEY_NAME = "id"
INTERFACE_MARKER = "I"
PLURAL_SUFFIX = "s"
FOREIGN_KEY_SUFFIX = "Id"

SCALAR_TYPES = (int, float, bool, str, bytes, Decimal, datetime, date, time, uuid.UUID, enum.Enum)

COLLECTION_ORIGINS = (
    list,
    set,
    frozenset,
    tuple,
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
)
COLLECTION_TYPES = (list, set, frozenset, tuple)

UNION_ORIGINS = (typing.Union, types.UnionType) if hasattr(types, "UnionType") else (typing.Union,)


class FieldKind(enum.Enum):
    SCALAR = "scalar"
    RELATION = "relation"
    COLLECTION = "collection"


@attr.s(auto_attribs=True, frozen=True)
class FieldDescriptor:
    name: str
    kind: FieldKind
    type: typing.Any = None
    foreign_key_name: typing.Optional[str] = None
    nullable: bool = False
    default: typing.Any = attr.ib(factory=lambda: attr.NOTHING)

    def is_unset(self, value: typing.Any) -> bool:
        if value is None:
            return True
        if self.default is attr.NOTHING or isinstance(self.default, attr.Factory):
            return False
        return value == self.default


@attr.s(auto_attribs=True, frozen=True)
class TypeMetadata:
    type: typing.Type
    table_name: str
    primary_key: typing.Optional[FieldDescriptor]
    fields: typing.Tuple[FieldDescriptor, ...] = ()

    @property
    def primary_key_name(self) -> str:
        return self.require_primary_key().name

    def require_primary_key(self) -> FieldDescriptor:
        if self.primary_key is None:
            raise NoPrimaryKeyError(self.type)
        return self.primary_key

    @property
    def scalars(self) -> typing.Tuple[FieldDescriptor, ...]:
        return tuple(field for field in self.fields if field.kind is FieldKind.SCALAR)

    @property
    def relations(self) -> typing.Tuple[FieldDescriptor, ...]:
        return tuple(field for field in self.fields if field.kind is FieldKind.RELATION)

    @property
    def collections(self) -> typing.Tuple[FieldDescriptor, ...]:
        return tuple(field for field in self.fields if field.kind is FieldKind.COLLECTION)

    @property
    def columns(self) -> typing.Tuple[FieldDescriptor, ...]:
        """Fields stored verbatim in the table: the primary key and every scalar."""
        key = (self.primary_key,) if self.primary_key is not None else ()
        return key + self.scalars


def _is_generic(field_type: typing.Type) -> bool:
    return typing.get_origin(field_type) is not None


def _get_wrapped_type(wrapped_type: typing.Type) -> typing.Type:
    return next(arg for arg in typing.get_args(wrapped_type) if arg is not type(None))


def _is_field_nullable(field_type: typing.Type) -> bool:
    args = typing.get_args(field_type)
    return typing.get_origin(field_type) in UNION_ORIGINS and len(args) == 2 and type(None) in args


def _is_collection(field_type: typing.Type) -> bool:
    if inspect.isclass(field_type) and not _is_generic(field_type):
        return issubclass(field_type, COLLECTION_TYPES)
    return typing.get_origin(field_type) in COLLECTION_ORIGINS


def _is_scalar(field_type: typing.Type) -> bool:
    return field_type is None or field_type is typing.Any or (
        inspect.isclass(field_type) and issubclass(field_type, SCALAR_TYPES)
    )


def _is_interface(entity_type: typing.Type) -> bool:
    return inspect.isabstract(entity_type) or getattr(entity_type, "_is_protocol", False)


def table_name_of(entity_type: typing.Type) -> str:
    explicit = entity_type.__dict__.get("__tablename__")
    if explicit:
        return explicit

    # naive pluralization, irregular plurals are not handled
    name = entity_type.__name__
    if _is_interface(entity_type) and name.startswith(INTERFACE_MARKER) and len(name) > len(INTERFACE_MARKER):
        name = name[len(INTERFACE_MARKER) :]
    return name + PLURAL_SUFFIX


def _describe(field: attr.Attribute) -> typing.Tuple[FieldDescriptor, bool]:
    field_type = field.type
    is_key = False
    nullable = False

    if Key.is_key(field_type):
        field_type = _get_wrapped_type(field_type)
        is_key = True
    if _is_field_nullable(field_type):
        field_type = _get_wrapped_type(field_type)
        nullable = True

    if _is_collection(field_type):
        element_type = next(iter(typing.get_args(field_type)), None)
        descriptor = FieldDescriptor(field.name, FieldKind.COLLECTION, element_type, None, nullable, field.default)
    elif _is_scalar(field_type):
        descriptor = FieldDescriptor(field.name, FieldKind.SCALAR, field_type, None, nullable, field.default)
    elif _is_generic(field_type):
        raise MetadataError(f"Unhandled generic type - {field_type}")
    else:
        foreign_key_name = field.metadata.get(FOREIGN_KEY) or field.name + FOREIGN_KEY_SUFFIX
        descriptor = FieldDescriptor(
            field.name, FieldKind.RELATION, field_type, foreign_key_name, nullable, field.default
        )

    return descriptor, is_key


def build(entity_type: typing.Type) -> TypeMetadata:
    if not attr.has(entity_type):
        raise MetadataError(f"{entity_type!r} is not an attrs class")
    try:
        attr.resolve_types(entity_type)
    except NameError as error:
        raise MetadataError(f"Could not resolve annotations of {entity_type.__name__}") from error

    described = [_describe(field) for field in attr.fields(entity_type)]

    primary_key = next((descriptor for descriptor, is_key in described if is_key), None)
    if primary_key is None:
        primary_key = next(
            (descriptor for descriptor, _ in described if descriptor.name.lower() == DEFAULT_KEY_NAME), None
        )
    if primary_key is not None and primary_key.kind is not FieldKind.SCALAR:
        raise MetadataError(f"Primary key {entity_type.__name__}.{primary_key.name} must be a scalar")

    fields = tuple(descriptor for descriptor, _ in described if descriptor is not primary_key)
    return TypeMetadata(entity_type, table_name_of(entity_type), primary_key, fields)
