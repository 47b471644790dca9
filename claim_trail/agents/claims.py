"""Claim extraction from free text or a URL."""

from __future__ import annotations

import sys

from claim_trail.contracts import ReasoningService, RetrievalService

SHORT_TEXT_LIMIT = 500


async def _main_claim(text: str, reasoning: ReasoningService) -> str | None:
    try:
        claims = await reasoning.extract_claims(text)
    except Exception as e:
        print(f"WARNING: claim extraction failed: {e}", file=sys.stderr)
        return None
    if claims:
        return str(claims[0]["claim"]).strip() or None
    return None


async def extract_claim(
    text: str | None = None,
    url: str | None = None,
    *,
    reasoning: ReasoningService,
    retriever: RetrievalService | None = None,
) -> str:
    """Return the single claim to verify.

    Short text is the claim itself. Longer text and fetched URL content go
    through the reasoning service and fall back to a prefix of the text.
    """
    if text and text.strip():
        text = text.strip()
        if len(text) < SHORT_TEXT_LIMIT:
            return text
        return await _main_claim(text, reasoning) or text[:SHORT_TEXT_LIMIT]

    if url:
        if retriever is None:
            raise ValueError("A retriever is required to extract a claim from a URL")
        page = await retriever.fetch(url)
        content = (page.get("content") or "").strip()
        if content:
            claim = await _main_claim(content, reasoning)
            if claim:
                return claim
        return (page.get("title") or "").strip() or content[:300] or url

    raise ValueError("Either text or url must be provided")
