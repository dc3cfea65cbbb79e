"""
Unit tests for synonym resolution
"""
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from ticket_manager.exceptions import SynonymResolutionError
from ticket_manager.models.schemas import SynonymEntry
from ticket_manager.services.synonym_resolver import (
    SynonymResolver,
    canonical_for,
    dedupe_terms,
    get_canonical_names,
    replace_with_canonical,
)


@pytest.fixture
def synonym_client():
    client = MagicMock()
    client.resolve = AsyncMock()
    return client


class TestSynonymResolver:

    @pytest.mark.asyncio
    async def test_resolves_known_terms(self, synonym_client):
        synonym_client.resolve.return_value = [
            {"input": "tee", "canonicalName": "T-Shirt", "confidence": "high", "alternates": ["tshirt"]},
            {"input": "mug", "canonicalName": None},
        ]
        resolver = SynonymResolver(synonym_client)

        synonym_map = await resolver.resolve(["tee", "mug"])

        assert set(synonym_map) == {"tee", "mug"}
        assert synonym_map["tee"].canonical == "T-Shirt"
        assert synonym_map["tee"].confidence == "high"
        assert synonym_map["mug"].canonical == "mug"
        assert synonym_map["mug"].confidence == "not_found"

    @pytest.mark.asyncio
    async def test_one_call_for_all_terms(self, synonym_client):
        synonym_client.resolve.return_value = []
        resolver = SynonymResolver(synonym_client)

        await resolver.resolve(["tee", "tee", "mug", " "])

        synonym_client.resolve.assert_awaited_once_with(["tee", "mug"])

    @pytest.mark.asyncio
    async def test_extra_resolutions_ignored(self, synonym_client):
        synonym_client.resolve.return_value = [
            {"input": "tee", "canonicalName": "T-Shirt"},
            {"input": "hoodie", "canonicalName": "Hooded Sweatshirt"},
        ]
        resolver = SynonymResolver(synonym_client)

        synonym_map = await resolver.resolve(["tee"])

        assert set(synonym_map) == {"tee"}

    @pytest.mark.asyncio
    async def test_empty_input_skips_call(self, synonym_client):
        resolver = SynonymResolver(synonym_client)

        assert await resolver.resolve([]) == {}
        synonym_client.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsuccessful_agent_maps_to_api_error(self, synonym_client):
        synonym_client.resolve.side_effect = SynonymResolutionError("unsuccessful")
        resolver = SynonymResolver(synonym_client)

        synonym_map = await resolver.resolve(["tee", "mug"])

        assert {t: e.canonical for t, e in synonym_map.items()} == {"tee": "tee", "mug": "mug"}
        assert all(e.confidence == "api_error" for e in synonym_map.values())

    @pytest.mark.asyncio
    async def test_transport_error_maps_to_error(self, synonym_client):
        synonym_client.resolve.side_effect = httpx.ConnectTimeout("timed out")
        resolver = SynonymResolver(synonym_client)

        synonym_map = await resolver.resolve(["tee"])

        assert synonym_map["tee"].canonical == "tee"
        assert synonym_map["tee"].confidence == "error"


class TestHelpers:

    def test_dedupe_terms(self):
        assert dedupe_terms(["a", "", "b", "a", None]) == ["a", "b"]

    def test_canonical_names(self):
        synonym_map = {
            "tee": SynonymEntry(canonical="T-Shirt"),
            "mug": SynonymEntry(canonical="mug", confidence="not_found"),
        }

        assert get_canonical_names(synonym_map) == ["T-Shirt", "mug"]
        assert canonical_for("tee", synonym_map) == "T-Shirt"
        assert canonical_for("pen", synonym_map) == "pen"

    def test_replace_with_canonical(self):
        synonym_map = {
            "tee": SynonymEntry(canonical="T-Shirt"),
            "polo tee": SynonymEntry(canonical="Polo Shirt"),
        }

        text = replace_with_canonical("Need 50 Polo Tee and 20 TEE", synonym_map)

        assert text == "Need 50 Polo Shirt and 20 T-Shirt"

    def test_replace_escapes_regex(self):
        synonym_map = {"a+b (c)": SynonymEntry(canonical="Combo $1")}

        assert replace_with_canonical("order a+b (c) now", synonym_map) == "order Combo $1 now"
