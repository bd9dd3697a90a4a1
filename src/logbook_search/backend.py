"""Elasticsearch client executing compiled log searches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError

from .config import SearchConfig
from .errors import SearchBackendError
from .models import BackendQuery

logger = logging.getLogger(__name__)


@dataclass
class SearchResults:
    """Log entries returned for one compiled query."""
    total: int
    entries: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"total": self.total, "count": len(self.entries), "entries": self.entries}


class LogSearchClient:
    """Executes BackendQuery objects against the log entry index."""

    def __init__(self, config: SearchConfig, client: Optional[Elasticsearch] = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> Elasticsearch:
        """Lazily create the Elasticsearch client."""
        if self._client is None:
            self._client = Elasticsearch(hosts=self.config.hosts)
        return self._client

    def search(self, query: BackendQuery) -> SearchResults:
        """Execute a compiled query.

        Raises:
            SearchBackendError: If the backend request fails
        """
        try:
            response = self.client.search(
                index=query.index,
                query=query.query,
                sort=query.sort,
                from_=query.from_,
                size=query.size,
            )
        except (ApiError, TransportError) as e:
            logger.error("Search against index %s failed: %s", query.index, e)
            raise SearchBackendError(f"Search failed: {e}") from e

        hits = response["hits"]
        total = hits.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)

        entries = []
        for hit in hits.get("hits", []):
            entry = dict(hit.get("_source") or {})
            entry.setdefault("id", hit.get("_id"))
            entries.append(entry)

        return SearchResults(total=total, entries=entries)

    def info(self) -> dict[str, Any]:
        """Describe the service and the state of its Elasticsearch cluster."""
        elastic: dict[str, Any] = {}
        try:
            response = self.client.info()
            elastic["status"] = "Connected"
            elastic["clusterName"] = response["cluster_name"]
            elastic["clusterUuid"] = response["cluster_uuid"]
            elastic["version"] = response["version"]["number"]
            elastic["elasticHosts"] = list(self.config.hosts)
        except (ApiError, TransportError) as e:
            logger.warning("Failed to gather Elasticsearch info: %s", e)
            elastic["status"] = f"Failed to connect to elastic {e}"

        return {
            "name": self.config.service_name,
            "version": self.config.version,
            "elastic": elastic,
        }
