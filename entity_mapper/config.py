import os
import typing

import inflection

from entity_mapper.exceptions import ConnectionConfigError


ENVIRONMENT_PREFIX = "ENTITY_MAPPER_"
ECHO_VARIABLE = f"{ENVIRONMENT_PREFIX}ECHO"
TRUTHY = ("1", "true", "yes", "on")

Environ = typing.Mapping[str, str]


def environment_variable(name: str) -> str:
    return f"{ENVIRONMENT_PREFIX}{inflection.underscore(name).upper()}_URL"


def resolve_connection_string(name_or_url: typing.Optional[str], environ: typing.Optional[Environ] = None) -> str:
    """Returns a database URL, looking named connections up in the environment.

    ``"sqlite:///notes.db"`` is used as given, while ``"mdbConnectionString"`` is read
    from ``ENTITY_MAPPER_MDB_CONNECTION_STRING_URL``.
    """
    if not name_or_url:
        raise ConnectionConfigError("Connection string must not be empty")
    if "://" in name_or_url:
        return name_or_url

    environ = os.environ if environ is None else environ
    url = environ.get(environment_variable(name_or_url))
    if not url:
        raise ConnectionConfigError(f"Could not find connection string: {name_or_url}")
    return url


def engine_options(environ: typing.Optional[Environ] = None) -> typing.Dict[str, typing.Any]:
    environ = os.environ if environ is None else environ
    return {"echo": environ.get(ECHO_VARIABLE, "").strip().lower() in TRUTHY}
