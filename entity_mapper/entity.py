import abc
import typing

import attr


FOREIGN_KEY = "entity_mapper.foreign_key"

T = typing.TypeVar("T")


class Key(typing.Generic[T]):
    @classmethod
    def is_key(cls, field_type: typing.Type) -> bool:
        return getattr(field_type, "__origin__", None) is cls


class EntityMeta(abc.ABCMeta):
    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if name == "Entity" and not bases:
            return cls
        return attr.s(auto_attribs=True)(cls)


class Entity(metaclass=EntityMeta):
    pass


def table(name: str) -> typing.Callable[[typing.Type[T]], typing.Type[T]]:
    def decorate(cls: typing.Type[T]) -> typing.Type[T]:
        cls.__tablename__ = name
        return cls

    return decorate


def foreign_key(name: str, default: typing.Any = None) -> typing.Any:
    return attr.ib(default=default, metadata={FOREIGN_KEY: name})
