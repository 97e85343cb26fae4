import logging
from typing import Dict, Type

import attr

from entity_mapper.metadata import TypeMetadata, build


logger = logging.getLogger(__name__)


@attr.s(auto_attribs=True)
class Registry:
    # plain dict writes are atomic, concurrent misses just build the same metadata twice
    types_to_metadata: Dict[Type, TypeMetadata] = attr.Factory(dict)

    def resolve(self, entity_type: Type) -> TypeMetadata:
        metadata = self.types_to_metadata.get(entity_type)
        if metadata is None:
            metadata = build(entity_type)
            logger.debug("Resolved %s to table %s", entity_type.__name__, metadata.table_name)
            self.types_to_metadata[entity_type] = metadata
        return metadata


default_registry = Registry()
