import typing
from concurrent.futures import ThreadPoolExecutor

from entity_mapper import Entity, Key, Registry, default_registry


class Note(Entity):
    codigo: Key[int] = 0
    content: str = ""


class Task(Entity):
    id: int = 0
    title: str = ""


def test_resolves_once_per_type() -> None:
    registry = Registry()

    first = registry.resolve(Note)

    assert registry.resolve(Note) is first
    assert list(registry.types_to_metadata) == [Note]


def test_registries_do_not_share_metadata() -> None:
    registry = Registry()
    registry.resolve(Task)

    assert Task not in Registry().types_to_metadata
    assert isinstance(default_registry, Registry)


def test_concurrent_resolution_agrees() -> None:
    registry = Registry()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: registry.resolve(Note), range(64)))

    names: typing.Set[typing.Tuple[str, str]] = {(result.table_name, result.primary_key_name) for result in results}
    assert names == {("Notes", "codigo")}
    assert all(result == results[0] for result in results)


class Author(Entity):
    id: int = 0
    username: str = ""


class Post(Entity):
    id: int = 0
    author: typing.Optional[Author] = None


def test_default_registry_resolves_relations() -> None:
    metadata = default_registry.resolve(Post)

    assert metadata.table_name == "Posts"
    assert [(field.name, field.foreign_key_name) for field in metadata.relations] == [("author", "authorId")]
