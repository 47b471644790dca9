"""Evidence normalization, canonical-URL dedup and gathering."""

from __future__ import annotations

import sys

from claim_trail.contracts import EvidenceItem, RetrievalService
from claim_trail.scoring.authority import domain_reputation
from claim_trail.utils.text import truncate
from claim_trail.utils.urls import canonical_url

ORIGINAL_SNIPPET_LIMIT = 500
DEFAULT_DOMAIN_SCORE = 50.0


def _domain_score(value, default: float = DEFAULT_DOMAIN_SCORE) -> float:
    """Explicit None counts as missing; 0 is a real score."""
    return default if value is None else float(value)


def normalize_evidence(raw: list[dict]) -> list[EvidenceItem]:
    """Coerce caller-supplied dicts into EvidenceItems.

    Items without a URL are dropped. A missing or null domain score defaults to 50.
    """
    items: list[EvidenceItem] = []
    for entry in raw:
        url = (entry.get("url") or "").strip()
        if not url:
            continue
        item = EvidenceItem(
            url=url,
            title=(entry.get("title") or "").strip(),
            snippet=(entry.get("snippet") or entry.get("content") or "").strip(),
            publish_timestamp=entry.get("publish_timestamp") or entry.get("published_date"),
            domain_score=_domain_score(entry.get("domain_score")),
        )
        if entry.get("is_original"):
            item["is_original"] = True
        if entry.get("relevance") is not None:
            item["relevance"] = float(entry["relevance"])
        items.append(item)
    return items


def dedupe_evidence(items: list[EvidenceItem]) -> list[EvidenceItem]:
    """Drop repeated URLs by canonical form, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[EvidenceItem] = []
    for item in items:
        key = canonical_url(item["url"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


async def gather_evidence(
    claim: str,
    original_url: str | None,
    retriever: RetrievalService,
    *,
    max_results: int = 8,
) -> list[EvidenceItem]:
    """Direct and fact-check results, with the original article first when given."""
    direct, fact_checks = await retriever.search_claim(claim, max_results=max_results)
    evidence: list[EvidenceItem] = [*direct, *fact_checks]

    if original_url:
        try:
            page = await retriever.fetch(original_url)
            original = EvidenceItem(
                url=original_url,
                title=page.get("title") or original_url,
                snippet=truncate(page.get("content", ""), ORIGINAL_SNIPPET_LIMIT),
                publish_timestamp=page.get("publish_timestamp"),
                domain_score=_domain_score(
                    page.get("domain_score"), domain_reputation(original_url)
                ),
                is_original=True,
            )
            evidence.insert(0, original)
        except Exception as e:
            print(f"WARNING: could not fetch original article {original_url}: {e}", file=sys.stderr)

    return dedupe_evidence(evidence)
