"""Tavily retrieval backend: news search, fact-check search and URL extraction."""

from __future__ import annotations

import sys
from typing import Any
from urllib.parse import urlparse

from claim_trail.contracts import EvidenceItem
from claim_trail.scoring.authority import FACT_CHECK_DOMAINS, domain_reputation


def _title_from_url(url: str) -> str:
    """Fallback title from the last path segment of a URL."""
    try:
        path = urlparse(url).path.rstrip("/")
    except ValueError:
        return url
    slug = path.rsplit("/", 1)[-1] if path else ""
    if not slug:
        return url
    slug = slug.rsplit(".", 1)[0]
    return slug.replace("-", " ").replace("_", " ").strip() or url


def _rank_key(item: EvidenceItem) -> float:
    relevance = item.get("relevance", 0.0) * 100
    return relevance * 0.6 + item.get("domain_score", 50) * 0.4


class TavilyRetriever:
    """RetrievalService backed by the Tavily search API."""

    name: str = "tavily"

    def __init__(self, *, api_key: str = "", client: Any = None) -> None:
        self.api_key = api_key
        self._client = client

    def _get_client(self):
        if self._client is None:
            from tavily import AsyncTavilyClient

            self._client = AsyncTavilyClient(api_key=self.api_key)
        return self._client

    async def search(
        self,
        query: str,
        *,
        max_results: int = 8,
        include_domains: list[str] | None = None,
    ) -> list[EvidenceItem]:
        """News search. Results are ranked by relevance and domain reputation."""
        client = self._get_client()
        kwargs: dict[str, Any] = dict(
            search_depth="advanced",
            topic="news",
            max_results=max_results,
            include_answer=False,
        )
        if include_domains:
            kwargs["include_domains"] = list(include_domains)

        response = await client.search(query, **kwargs)

        items: list[EvidenceItem] = []
        for result in response.get("results", [])[:max_results]:
            url = result.get("url", "")
            if not url:
                continue
            item = EvidenceItem(
                url=url,
                title=result.get("title") or _title_from_url(url),
                snippet=result.get("content", ""),
                publish_timestamp=result.get("published_date"),
                domain_score=domain_reputation(url),
                relevance=float(result.get("score") or 0.0),
            )
            items.append(item)

        items.sort(key=_rank_key, reverse=True)
        return items

    async def search_claim(
        self, claim: str, *, max_results: int = 8
    ) -> tuple[list[EvidenceItem], list[EvidenceItem]]:
        """Direct search plus a fact-check search restricted to fact-checkers.

        A failed fact-check search degrades to an empty list; a failed
        direct search propagates.
        """
        direct = await self.search(claim, max_results=max_results)
        try:
            fact_checks = await self.search(
                f"fact check {claim}",
                max_results=3,
                include_domains=list(FACT_CHECK_DOMAINS),
            )
        except Exception as e:
            print(f"WARNING: fact-check search failed: {e}", file=sys.stderr)
            fact_checks = []
        return direct, fact_checks

    async def fetch(self, url: str) -> dict[str, Any]:
        """Extract one URL's content. Falls back to a one-result search for the URL."""
        client = self._get_client()
        try:
            response = await client.extract(urls=[url])
            results = response.get("results", [])
            if results:
                content = results[0].get("raw_content") or ""
                return {
                    "url": url,
                    "title": results[0].get("title") or _title_from_url(url),
                    "content": content,
                    "publish_timestamp": None,
                    "domain_score": domain_reputation(url),
                }
        except Exception as e:
            print(f"WARNING: extract failed for {url}: {e}", file=sys.stderr)

        response = await client.search(url, max_results=1)
        results = response.get("results", [])
        if not results:
            raise RuntimeError(f"Could not fetch content from {url}")
        first = results[0]
        return {
            "url": url,
            "title": first.get("title") or _title_from_url(url),
            "content": first.get("content", ""),
            "publish_timestamp": first.get("published_date"),
            "domain_score": domain_reputation(url),
        }
