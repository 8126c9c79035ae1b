# sectionlink/services/catalog.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..errors import DataSourceUnavailable
from ..models.container import Container
from ..models.section import Section

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeSummary:
    id: int
    container_id: int


@dataclass(frozen=True)
class AncestorSegment:
    name: str


@dataclass(frozen=True)
class ContainerSummary:
    id: int
    name: str


class CatalogSource(Protocol):
    """What the resolver needs from the hierarchical catalog."""

    def find_node(self, section_id: int) -> Optional[NodeSummary]: ...

    def fetch_ancestor_chain(self, container_id: int, section_id: int) -> List[AncestorSegment]: ...

    def list_all_containers(self) -> List[ContainerSummary]: ...


class SqlCatalogSource:
    """
    Catalog backed by the ``container`` and ``section`` tables.

    Database errors are re-raised as ``DataSourceUnavailable``; there is no
    retry here.
    """

    def __init__(self, session):
        self.session = session

    def find_node(self, section_id: int) -> Optional[NodeSummary]:
        try:
            row = (
                self.session.query(Section.id, Section.container_id)
                .filter(Section.id == section_id)
                .first()
            )
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"could not look up section {section_id}") from exc

        if row is None:
            return None
        return NodeSummary(id=row.id, container_id=row.container_id)

    def fetch_ancestor_chain(self, container_id: int, section_id: int) -> List[AncestorSegment]:
        """
        Names from the container root down to ``section_id``, inclusive.

        The walk climbs ``parent_id`` one level per query and stays inside
        ``container_id``. It stops on a missing parent or on a cycle.
        """
        names: List[str] = []
        current: Optional[int] = section_id
        seen = set()  # guard against accidental cycles

        try:
            while current is not None:
                if current in seen:
                    logger.warning(
                        "Cycle in section tree of container %s at section %s", container_id, current
                    )
                    break
                seen.add(current)

                row = (
                    self.session.query(Section.name, Section.parent_id)
                    .filter(Section.id == current, Section.container_id == container_id)
                    .first()
                )
                if row is None:
                    break

                names.append(row.name)
                current = row.parent_id
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(
                f"could not walk section chain for {section_id} in container {container_id}"
            ) from exc

        names.reverse()
        return [AncestorSegment(name=name) for name in names]

    def list_all_containers(self) -> List[ContainerSummary]:
        try:
            rows = self.session.query(Container.id, Container.name).order_by(Container.id).all()
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable("could not list containers") from exc
        return [ContainerSummary(id=cid, name=name) for cid, name in rows]
