"""Pytest configuration and shared fixtures for sectionlink tests."""

from typing import Dict, List, Optional

import pytest

from sectionlink import create_app
from sectionlink.db.base import sqla_db
from sectionlink.models import Container, Section
from sectionlink.services.cache import CacheStore, MemoryCacheBackend
from sectionlink.services.catalog import AncestorSegment, ContainerSummary, NodeSummary


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingCatalog:
    """
    In-memory catalog that records how often each method is called.

    ``nodes`` maps section id to container id, ``chains`` maps section id to
    its root-first list of names.
    """

    def __init__(self):
        self.nodes: Dict[int, int] = {}
        self.chains: Dict[int, List[str]] = {}
        self.containers: Dict[int, str] = {}
        self.calls = {"find_node": 0, "fetch_ancestor_chain": 0, "list_all_containers": 0}

    def add_section(self, section_id: int, container_id: int, chain: List[str]) -> None:
        self.nodes[section_id] = container_id
        self.chains[section_id] = chain

    def find_node(self, section_id: int) -> Optional[NodeSummary]:
        self.calls["find_node"] += 1
        if section_id not in self.nodes:
            return None
        return NodeSummary(id=section_id, container_id=self.nodes[section_id])

    def fetch_ancestor_chain(self, container_id: int, section_id: int) -> List[AncestorSegment]:
        self.calls["fetch_ancestor_chain"] += 1
        return [AncestorSegment(name=name) for name in self.chains[section_id]]

    def list_all_containers(self) -> List[ContainerSummary]:
        self.calls["list_all_containers"] += 1
        return [ContainerSummary(id=cid, name=name) for cid, name in sorted(self.containers.items())]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> CacheStore:
    return CacheStore(backend=MemoryCacheBackend(clock=clock))


@pytest.fixture
def catalog() -> CountingCatalog:
    return CountingCatalog()


@pytest.fixture
def app():
    """App on an in-memory database with a small two-container catalog."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "WTF_CSRF_ENABLED": False,
        "SECRET_KEY": "test",
    })

    with app.app_context():
        catalog_container = Container(id=1, name="Catalog", code="catalog")
        news_container = Container(id=2, name="News", code="news")
        sqla_db.session.add_all([catalog_container, news_container])
        sqla_db.session.add_all([
            Section(id=1, container_id=1, parent_id=None, name="Root"),
            Section(id=2, container_id=1, parent_id=1, name=" Cats "),
            Section(id=3, container_id=1, parent_id=2, name="Kittens"),
            # parent lives in another container
            Section(id=4, container_id=2, parent_id=1, name="Orphan"),
        ])
        sqla_db.session.commit()

    yield app

    with app.app_context():
        sqla_db.session.remove()
        sqla_db.drop_all()
