import typing


class MapperError(Exception):
    pass


class ConnectionConfigError(MapperError):
    pass


class SessionClosedError(MapperError):
    pass


class MetadataError(MapperError):
    pass


class NoPrimaryKeyError(MetadataError):
    def __init__(self, entity_type: typing.Type) -> None:
        super().__init__(f"Could not find primary key for {entity_type.__name__}")
        self.entity_type = entity_type


class MissingKeyError(MetadataError):
    def __init__(self, entity_type: typing.Type, key_name: str) -> None:
        super().__init__(f"{entity_type.__name__}.{key_name} is not set")
        self.entity_type = entity_type
        self.key_name = key_name


class StatementError(MapperError):
    def __init__(self, operation: str, table: str) -> None:
        super().__init__(f"Could not {operation} on {table}")
        self.operation = operation
        self.table = table


class IdentityRetrievalError(MapperError):
    def __init__(self, table: str, value: typing.Any) -> None:
        super().__init__(f"Could not get last primary key of {table}, got {value!r}")
        self.table = table
        self.value = value
