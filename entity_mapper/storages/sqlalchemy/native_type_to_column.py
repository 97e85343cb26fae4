import enum
import typing
import uuid
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, LargeBinary, Numeric, String, Time, Uuid
from sqlalchemy.types import NullType


mapping = {
    bool: Boolean,
    int: Integer,
    float: Float,
    str: String,
    bytes: LargeBinary,
    Decimal: Numeric,
    datetime: DateTime,
    date: Date,
    time: Time,
    uuid.UUID: Uuid,
}


def convert(arg: typing.Optional[typing.Type]) -> typing.Any:
    # enums are bound by value, leaving the driver to pick the type
    if arg is None or not isinstance(arg, type) or issubclass(arg, enum.Enum):
        return NullType
    for base in arg.__mro__:
        if base in mapping:
            return mapping[base]
    raise TypeError(f"Unsupported type - {arg}")
