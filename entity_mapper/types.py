import enum
import typing
import uuid
from datetime import date, time
from decimal import Decimal
from functools import singledispatch

from entity_mapper.metadata import FieldDescriptor


@singledispatch
def to_storage(argument: typing.Any) -> typing.Any:
    return argument


@to_storage.register(enum.Enum)
def _(argument: enum.Enum) -> typing.Any:
    return argument.value


@singledispatch
def render_literal(argument: typing.Any) -> str:
    return str(argument)


@render_literal.register(str)
def _(argument: str) -> str:
    return "'" + argument.replace("'", "''") + "'"


@render_literal.register(date)
@render_literal.register(time)
def _(argument: typing.Union[date, time]) -> str:
    return render_literal(str(argument))


@render_literal.register(uuid.UUID)
def _(argument: uuid.UUID) -> str:
    return render_literal(str(argument))


@render_literal.register(enum.Enum)
def _(argument: enum.Enum) -> str:
    return render_literal(to_storage(argument))


@render_literal.register(bool)
def _(argument: bool) -> str:
    return "1" if argument else "0"


def from_storage(argument: typing.Any, field: FieldDescriptor) -> typing.Any:
    field_type = field.type
    if argument is None or not isinstance(field_type, type) or isinstance(argument, field_type):
        return argument

    try:
        converter = mapping[field_type]
    except KeyError:
        if issubclass(field_type, enum.Enum):
            return field_type(argument)
        return argument
    return converter(argument)


mapping = {uuid.UUID: lambda value: uuid.UUID(str(value)), Decimal: lambda value: Decimal(str(value)), bool: bool}
