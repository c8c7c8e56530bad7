"""Tests for per-category domain preparation."""

from unittest.mock import AsyncMock

import pytest

from app.core.config import Settings
from app.core.domain_prep import build_category_query, prepare_domain
from app.core.embeddings import Embedder
from app.core.errors import SearchUnavailableError
from app.core.schemas_discovery import DiscoveryResult, DomainPrepRequest, RegulatoryCategory
from app.core.source_discovery import SourceDiscoverer
from tests.fakes.fake_providers import FakeEmbeddingProvider, FakeReader, fake_embedder


@pytest.fixture
def settings():
    return Settings(BRAVE_API_KEY=None, JINA_API_KEY=None, OPENAI_API_KEY=None)


def test_build_category_query():
    query = build_category_query(RegulatoryCategory.ENVIRONMENTAL, "USA", "Texas", "solar farm")
    assert query == "environmental regulations EPA compliance requirements Texas, USA solar farm"


def test_build_category_query_without_site_or_asset_class():
    query = build_category_query(RegulatoryCategory.FINANCIAL, "Germany", None, "")
    assert query == "financial compliance regulations SOX compliance requirements Germany"


@pytest.mark.asyncio
async def test_prepare_domain_curated(settings):
    discoverer = SourceDiscoverer(embedder=fake_embedder(), reader=FakeReader(), settings=settings)
    snapshots = []
    request = DomainPrepRequest(
        country="United States",
        site="Texas",
        asset_class="refinery",
        categories=[RegulatoryCategory.ENVIRONMENTAL, RegulatoryCategory.SAFETY_WORKFORCE],
    )

    response = await prepare_domain(request, discoverer=discoverer, on_progress=snapshots.append)

    progress = response.progress
    assert progress.status == "ready"
    assert progress.progress == 100
    assert progress.sources_indexed == len(response.sources)
    assert {c.category for c in response.sources} == {"environmental", "safety_workforce"}
    assert [s.progress for s in snapshots] == sorted(s.progress for s in snapshots)
    assert snapshots[-1].status == "ready"


@pytest.mark.asyncio
async def test_prepare_domain_configuration_error(settings):
    embedder = Embedder(providers=[FakeEmbeddingProvider(configured=False)])
    discoverer = SourceDiscoverer(embedder=embedder, reader=FakeReader(), settings=settings)

    response = await prepare_domain(
        DomainPrepRequest(country="USA", categories=[RegulatoryCategory.FINANCIAL]),
        discoverer=discoverer,
    )

    assert response.progress.status == "error"
    assert response.progress.log[-1].startswith("Error:")


@pytest.mark.asyncio
async def test_prepare_domain_continues_after_category_failure():
    discoverer = AsyncMock(spec=SourceDiscoverer)
    discoverer.discover.side_effect = [
        SearchUnavailableError("no sources"),
        DiscoveryResult(query="q", total_found=2, indexed=2),
    ]

    response = await prepare_domain(
        DomainPrepRequest(
            country="Japan",
            categories=[RegulatoryCategory.FINANCIAL, RegulatoryCategory.LEGAL_CONTRACTUAL],
        ),
        discoverer=discoverer,
    )

    assert response.progress.status == "ready"
    assert response.progress.sources_indexed == 2
    assert any(line.startswith("Skipped financial") for line in response.progress.log)
