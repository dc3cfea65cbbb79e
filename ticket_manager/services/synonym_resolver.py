"""
Synonym Resolver

Maps customer product terms to canonical catalog names. Resolution never
blocks the pipeline: on any failure every term maps to itself.
"""
import re
from typing import Iterable, List

from ticket_manager.agents.synonym import SynonymAgentClient
from ticket_manager.exceptions import SynonymResolutionError
from ticket_manager.models.schemas import SynonymConfidence, SynonymEntry, SynonymMap
from ticket_manager.utils.logger import get_logger

logger = get_logger(__name__)


def dedupe_terms(terms: Iterable[str]) -> List[str]:
    """Drop blanks and duplicates, keeping first-seen order"""
    seen = []
    for term in terms or []:
        if term and term.strip() and term not in seen:
            seen.append(term)
    return seen


def build_fallback_map(terms: List[str], reason: SynonymConfidence) -> SynonymMap:
    """Identity mapping tagged with why resolution did not happen"""
    return {
        term: SynonymEntry(canonical=term, confidence=reason.value)
        for term in terms
    }


def get_canonical_names(synonym_map: SynonymMap) -> List[str]:
    """Canonical names of a synonym map, in term order"""
    return [entry.canonical for entry in synonym_map.values()]


def canonical_for(term: str, synonym_map: SynonymMap) -> str:
    """Canonical name for a term; unknown terms map to themselves"""
    entry = synonym_map.get(term)
    return entry.canonical if entry and entry.canonical else term


def replace_with_canonical(text: str, synonym_map: SynonymMap) -> str:
    """
    Replace raw terms in text with their canonical names

    Longer terms are replaced first; matching is case-insensitive.
    """
    result = text
    for term in sorted(synonym_map, key=len, reverse=True):
        canonical = synonym_map[term].canonical
        if canonical and canonical != term:
            result = re.sub(re.escape(term), lambda _: canonical, result, flags=re.IGNORECASE)
    return result


class SynonymResolver:
    """Resolves extracted product terms through the synonym agent"""

    def __init__(self, client: SynonymAgentClient):
        self.client = client

    async def resolve(self, terms: Iterable[str]) -> SynonymMap:
        """
        Resolve terms to canonical names with one agent call

        Args:
            terms: Raw product terms from the classification

        Returns:
            Map covering exactly the deduplicated input terms
        """
        unique_terms = dedupe_terms(terms)
        if not unique_terms:
            return {}

        try:
            resolutions = await self.client.resolve(unique_terms)
        except SynonymResolutionError as e:
            logger.warning(f"{e}; keeping original terms")
            return build_fallback_map(unique_terms, SynonymConfidence.API_ERROR)
        except Exception as e:
            logger.error(f"Error calling synonym resolver: {e}")
            return build_fallback_map(unique_terms, SynonymConfidence.ERROR)

        by_input = {
            r.get("input"): r for r in resolutions
            if isinstance(r, dict) and r.get("input") in unique_terms
        }

        synonym_map: SynonymMap = {}
        for term in unique_terms:
            resolution = by_input.get(term) or {}
            canonical = resolution.get("canonicalName")
            if canonical:
                synonym_map[term] = SynonymEntry(
                    canonical=canonical,
                    confidence=resolution.get("confidence") or SynonymConfidence.RESOLVED.value,
                    alternates=resolution.get("alternates") or [],
                    category=resolution.get("category")
                )
                logger.info(f"Resolved: \"{term}\" -> \"{canonical}\" ({synonym_map[term].confidence})")
            else:
                synonym_map[term] = SynonymEntry(
                    canonical=term,
                    confidence=SynonymConfidence.NOT_FOUND.value
                )
                logger.info(f"Not resolved: \"{term}\" (keeping original)")

        return synonym_map
