"""
Tests for the iNaturalist common-name lookup and its cache.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
import requests

from flowering_phenology.datasources.inaturalist import (
    COMMON_NAMES_PATH,
    CommonNameCache,
    client,
    lookup_common_name,
    resolve_common_names,
)
from flowering_phenology.store import DataStore

if TYPE_CHECKING:
    from pathlib import Path

# =============================================================================
# Sample API Responses
# =============================================================================

SAMPLE_TAXA_RESPONSE: dict = {
    "total_results": 2,
    "page": 1,
    "per_page": 10,
    "results": [
        {
            "id": 48734,
            "name": "Carex lupulina",
            "rank": "species",
            "preferred_common_name": "hop sedge",
        },
        {
            "id": 48735,
            "name": "Carex lurida",
            "rank": "species",
            "preferred_common_name": "shallow sedge",
        },
    ],
}


# =============================================================================
# Client
# =============================================================================


class TestSearchTaxa:
    """Taxa search request."""

    @patch("flowering_phenology.datasources.inaturalist.client.get_json")
    def test_query_parameters(self, mock_get: MagicMock) -> None:
        mock_get.return_value = SAMPLE_TAXA_RESPONSE
        results = client.search_taxa("Carex lurida")

        assert [r["name"] for r in results] == ["Carex lupulina", "Carex lurida"]
        url, params = mock_get.call_args.args
        assert url == "https://api.inaturalist.org/v1/taxa"
        assert params["q"] == "Carex lurida"
        assert params["rank"] == "species"
        assert params["taxon_id"] == client.PLANTAE
        assert params["locale"] == "en"
        assert mock_get.call_args.kwargs["limiter"] is client.limiter

    @patch("flowering_phenology.datasources.inaturalist.client.get_json")
    def test_no_results_key(self, mock_get: MagicMock) -> None:
        mock_get.return_value = {}
        assert client.search_taxa("Nothing here") == []


class TestLookupCommonName:
    """Exact-match name resolution."""

    @patch("flowering_phenology.datasources.inaturalist.client.search_taxa")
    def test_exact_match_only(self, mock_search: MagicMock) -> None:
        mock_search.return_value = SAMPLE_TAXA_RESPONSE["results"]
        assert lookup_common_name("Carex lurida") == "shallow sedge"

    @patch("flowering_phenology.datasources.inaturalist.client.search_taxa")
    def test_case_insensitive(self, mock_search: MagicMock) -> None:
        mock_search.return_value = [{"name": "Acer rubrum", "preferred_common_name": "red maple"}]
        assert lookup_common_name("acer rubrum") == "red maple"

    @patch("flowering_phenology.datasources.inaturalist.client.search_taxa")
    def test_no_exact_match(self, mock_search: MagicMock) -> None:
        mock_search.return_value = SAMPLE_TAXA_RESPONSE["results"]
        assert lookup_common_name("Carex lacustris") == ""

    @patch("flowering_phenology.datasources.inaturalist.client.search_taxa")
    def test_taxon_without_common_name(self, mock_search: MagicMock) -> None:
        mock_search.return_value = [{"name": "Carex lurida", "preferred_common_name": None}]
        assert lookup_common_name("Carex lurida") == ""


# =============================================================================
# Cache
# =============================================================================


class TestCommonNameCache:
    """Persistent name cache."""

    def test_set_writes_immediately(self, tmp_path: Path) -> None:
        cache = CommonNameCache(DataStore(tmp_path))
        cache.set("Acer rubrum", "red maple")

        envelope = json.loads((tmp_path / COMMON_NAMES_PATH).read_text())
        assert envelope["meta"]["source"] == "inaturalist.org"
        assert envelope["data"]["Acer rubrum"]["common_name"] == "red maple"

    def test_reloads_from_store(self, tmp_path: Path) -> None:
        CommonNameCache(DataStore(tmp_path)).set("Acer rubrum", "red maple")
        reloaded = CommonNameCache(DataStore(tmp_path))
        assert len(reloaded) == 1
        assert reloaded.get("Acer rubrum") == "red maple"

    def test_unknown_is_none(self, tmp_path: Path) -> None:
        assert CommonNameCache(DataStore(tmp_path)).get("Acer rubrum") is None

    def test_known_without_name_is_empty_string(self, tmp_path: Path) -> None:
        cache = CommonNameCache(DataStore(tmp_path))
        cache.set("Carex lurida", "")
        assert cache.get("Carex lurida") == ""

    def test_stale_entry_is_none(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        old = (datetime.now(UTC) - timedelta(days=200)).isoformat()
        store.write(
            COMMON_NAMES_PATH,
            {"Acer rubrum": {"common_name": "red maple", "resolved_at": old}},
            source="inaturalist.org",
        )
        assert CommonNameCache(store).get("Acer rubrum") is None
        assert CommonNameCache(store, ttl=timedelta(days=365)).get("Acer rubrum") == "red maple"


# =============================================================================
# Batch resolution
# =============================================================================


class TestResolveCommonNames:
    """Cache-first, non-fatal batch lookups."""

    def test_cache_checked_before_network(self, tmp_path: Path) -> None:
        cache = CommonNameCache(DataStore(tmp_path))
        cache.set("Acer rubrum", "red maple")
        lookup = MagicMock(return_value="shallow sedge")

        result = resolve_common_names(["Acer rubrum", "Carex lurida"], cache, lookup=lookup)

        lookup.assert_called_once_with("Carex lurida")
        assert result.names == {"Acer rubrum": "red maple", "Carex lurida": "shallow sedge"}
        assert result.fetched == 1
        assert result.failures == ()

    def test_each_success_cached_before_next_lookup(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        cache = CommonNameCache(store)
        seen_on_disk: list[set[str]] = []

        def lookup(name: str) -> str:
            seen_on_disk.append(set(store.read(COMMON_NAMES_PATH) or {}))
            return f"{name} common"

        names = ["Acer rubrum", "Betula nigra", "Carex lurida"]
        resolve_common_names(names, cache, lookup=lookup)
        assert seen_on_disk == [set(), {"Acer rubrum"}, {"Acer rubrum", "Betula nigra"}]

    def test_failure_is_non_fatal(self, tmp_path: Path) -> None:
        cache = CommonNameCache(DataStore(tmp_path))

        def lookup(name: str) -> str:
            if name == "Betula nigra":
                raise requests.ConnectionError("connection reset")
            return "ok"

        names = ["Acer rubrum", "Betula nigra", "Carex lurida"]
        result = resolve_common_names(names, cache, lookup=lookup)
        assert result.names["Betula nigra"] == ""
        assert result.names["Carex lurida"] == "ok"
        assert result.failures == ("Betula nigra",)
        assert cache.get("Betula nigra") is None

    def test_bad_payload_is_non_fatal(self, tmp_path: Path) -> None:
        cache = CommonNameCache(DataStore(tmp_path))
        lookup = MagicMock(side_effect=ValueError("Expected a JSON object"))
        result = resolve_common_names(["Acer rubrum"], cache, lookup=lookup)
        assert result.failures == ("Acer rubrum",)

    def test_failure_is_logged(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        cache = CommonNameCache(DataStore(tmp_path))
        lookup = MagicMock(side_effect=requests.Timeout("slow"))
        resolve_common_names(["Acer rubrum"], cache, lookup=lookup)
        assert "Acer rubrum" in caplog.text

    def test_previous_failure_retried_next_run(self, tmp_path: Path) -> None:
        cache = CommonNameCache(DataStore(tmp_path))
        resolve_common_names(
            ["Acer rubrum"], cache, lookup=MagicMock(side_effect=requests.Timeout("slow"))
        )
        lookup = MagicMock(return_value="red maple")
        result = resolve_common_names(["Acer rubrum"], cache, lookup=lookup)
        assert result.names == {"Acer rubrum": "red maple"}
        lookup.assert_called_once()
