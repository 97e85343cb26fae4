from typing import Generator

import pytest
from _pytest.fixtures import SubRequest
from sqlalchemy.engine import Engine, create_engine
from sqlalchemy.pool import StaticPool


@pytest.fixture()
def engine(request: SubRequest) -> Generator[Engine, None, None]:
    connection_url = request.config.getoption("--entity-mapper-url", default=None) or "sqlite://"
    if connection_url.startswith("sqlite"):
        # one shared in-memory database for every connection of the test
        engine = create_engine(connection_url, poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(connection_url)
    yield engine
    engine.dispose()
