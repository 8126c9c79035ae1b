# sectionlink/services/section_paths.py
from typing import Any, Dict, Optional

from .cache import CacheStore
from .catalog import CatalogSource

LABEL_NO_VALUE = "(ничего не выбрано)"
PATH_SEPARATOR = " / "

CONTAINER_LIST_KEY = "container-list"


def section_path_key(section_id: int) -> str:
    return f"section-path:{section_id}"


def coerce_id(value: Any) -> int:
    """
    Turn a raw field value into a catalog id. ``None``, ``""`` and anything
    that isn't an integer come back as 0, the "nothing selected" value.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


class SectionPathResolver:
    """
    Turns a section id into its full name ("Root / Cats / Kittens") and
    lists the containers a field can be bound to, both through a shared
    ``CacheStore``.

    Args:
        source: the catalog to read from.
        cache: store shared across requests.
        cache_ttl: seconds to keep results; ``None`` uses the store default.
    """

    def __init__(self, source: CatalogSource, cache: CacheStore, cache_ttl: Optional[float] = None):
        self.source = source
        self.cache = cache
        self.cache_ttl = cache_ttl

    def resolve_section_path(self, section_id: Any) -> str:
        section_id = coerce_id(section_id)

        def compute():
            if section_id <= 0:
                return LABEL_NO_VALUE, False

            node = self.source.find_node(section_id)
            if node is None:
                # The section may show up later, so don't remember the miss.
                return LABEL_NO_VALUE, False

            # TODO: tag entries with f"container:{node.container_id}" once
            # section edits call CacheStore.invalidate_tag.
            chain = self.source.fetch_ancestor_chain(node.container_id, node.id)
            return PATH_SEPARATOR.join(segment.name.strip() for segment in chain), True

        result = self.cache.get_or_compute(section_path_key(section_id), compute, ttl=self.cache_ttl)
        return result.strip()

    def list_containers(self) -> Dict[int, str]:
        def compute():
            labels = {
                container.id: f"{container.name} [{container.id}]"
                for container in self.source.list_all_containers()
            }
            # an empty catalog is a real answer, cache it too
            return labels, True

        return dict(self.cache.get_or_compute(CONTAINER_LIST_KEY, compute, ttl=self.cache_ttl))
