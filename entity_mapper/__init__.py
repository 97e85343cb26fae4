from entity_mapper.cascade import CascadeStyle
from entity_mapper.entity import Entity, Key, foreign_key, table
from entity_mapper.exceptions import (
    ConnectionConfigError,
    IdentityRetrievalError,
    MapperError,
    MetadataError,
    MissingKeyError,
    NoPrimaryKeyError,
    SessionClosedError,
    StatementError,
)
from entity_mapper.registry import Registry, default_registry
from entity_mapper.session import Session


__all__ = [
    "CascadeStyle",
    "ConnectionConfigError",
    "Entity",
    "IdentityRetrievalError",
    "Key",
    "MapperError",
    "MetadataError",
    "MissingKeyError",
    "NoPrimaryKeyError",
    "Registry",
    "Session",
    "SessionClosedError",
    "StatementError",
    "default_registry",
    "foreign_key",
    "table",
]
