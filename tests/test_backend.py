"""Tests for the Elasticsearch search client adapter."""

from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import TransportError

from logbook_search.backend import LogSearchClient, SearchResults
from logbook_search.errors import SearchBackendError, SearchValidationError


@pytest.fixture
def es():
    """Mock Elasticsearch client."""
    return MagicMock()


@pytest.fixture
def query(compiler, clock):
    """A compiled query."""
    _, compiled = compiler.compile({"tags": ["beam"], "size": ["2"]}, clock).unwrap()
    return compiled


class TestSearch:
    """Tests for LogSearchClient.search."""

    def test_passes_compiled_request(self, config, es, query):
        """The compiled index, query, sort and window are sent."""
        es.search.return_value = {"hits": {"total": {"value": 0}, "hits": []}}

        LogSearchClient(config, es).search(query)

        es.search.assert_called_once_with(
            index="test_logs",
            query=query.query,
            sort=query.sort,
            from_=0,
            size=2,
        )

    def test_returns_sources_with_ids(self, config, es, query):
        """Hits become entries carrying their document id."""
        es.search.return_value = {
            "hits": {
                "total": {"value": 7, "relation": "eq"},
                "hits": [
                    {"_id": "1", "_source": {"title": "Beam lost"}},
                    {"_id": "2", "_source": {"title": "Beam back", "id": "2"}},
                ],
            }
        }

        results = LogSearchClient(config, es).search(query)

        assert results.total == 7
        assert results.entries == [
            {"title": "Beam lost", "id": "1"},
            {"title": "Beam back", "id": "2"},
        ]

    def test_legacy_integer_total(self, config, es, query):
        """An integer total is accepted."""
        es.search.return_value = {"hits": {"total": 3, "hits": []}}
        assert LogSearchClient(config, es).search(query).total == 3

    def test_backend_failure(self, config, es, query):
        """Client errors become SearchBackendError, not validation errors."""
        es.search.side_effect = TransportError("connection refused")

        with pytest.raises(SearchBackendError) as exc_info:
            LogSearchClient(config, es).search(query)

        assert not isinstance(exc_info.value, SearchValidationError)

    def test_results_to_dict(self):
        """Results render with count."""
        results = SearchResults(total=10, entries=[{"id": "1"}])
        assert results.to_dict() == {"total": 10, "count": 1, "entries": [{"id": "1"}]}


class TestClientConstruction:
    """Tests for lazy client creation."""

    def test_client_created_from_hosts(self, config):
        """The Elasticsearch client is built from configured hosts on first use."""
        with patch("logbook_search.backend.Elasticsearch") as es_class:
            client = LogSearchClient(config)
            es_class.assert_not_called()

            assert client.client is es_class.return_value
            es_class.assert_called_once_with(hosts=["http://localhost:9200"])


class TestInfo:
    """Tests for service information."""

    def test_connected(self, config, es):
        """Cluster details are reported when reachable."""
        es.info.return_value = {
            "cluster_name": "olog",
            "cluster_uuid": "abc",
            "version": {"number": "8.12.0"},
        }

        info = LogSearchClient(config, es).info()

        assert info["name"] == "Logbook Search"
        assert info["version"] == "1.0.0"
        assert info["elastic"]["status"] == "Connected"
        assert info["elastic"]["clusterName"] == "olog"
        assert info["elastic"]["version"] == "8.12.0"

    def test_unreachable(self, config, es):
        """Connection failures are reported, not raised."""
        es.info.side_effect = TransportError("connection refused")

        info = LogSearchClient(config, es).info()

        assert info["elastic"]["status"].startswith("Failed to connect to elastic")
