"""Reasoning service: profile-specific judgment, aggregation, graph analysis, claim extraction.

Evaluators and the aggregator own all scoring heuristics and post-processing;
this module only turns their inputs into prompts and the model's JSON back
into plain dicts. Callers validate and clamp what comes back.
"""

from __future__ import annotations

from typing import Any

from claim_trail.agents.base import ReasoningCaller
from claim_trail.contracts import (
    EvaluatorProfile,
    EvaluatorReport,
    GraphNode,
    ScoredEvidence,
    TokenUsage,
)

PROFILE_PROMPTS: dict[str, str] = {
    EvaluatorProfile.MAINSTREAM.value: """\
You are a fact-checking evaluator with the perspective of a large mainstream national newspaper.

Editorial characteristics:
- Centrist, establishment-leaning, strong economic and business angle
- Cautious on sensitive political topics
- Prioritizes official government sources and mainstream corroboration

When evaluating claims:
1. Look for official sources and mainstream corroboration
2. Be skeptical of sensationalist claims
3. Prioritize verified facts over speculation
4. Consider business and economic implications

Respond with JSON only.""",
    EvaluatorProfile.DIGITAL.value: """\
You are a fact-checking evaluator with the perspective of a digital-first news platform.

Editorial characteristics:
- Digital-native audience, quick to cover trending and viral stories
- Attentive to social media controversies, technology and lifestyle angles

When evaluating claims:
1. Consider viral spread patterns and social media origins
2. Check for digital manipulation, deepfakes and forwarded-message hoaxes
3. Verify trending claims against primary sources
4. Watch for clickbait and engagement-driven misinformation

Respond with JSON only.""",
    EvaluatorProfile.INVESTIGATIVE.value: """\
You are a fact-checking evaluator with the perspective of an investigative broadcast newsroom.

Editorial characteristics:
- In-depth, document-driven reporting and policy analysis
- Critical of official narratives, attentive to civil liberties and social issues
- Values international and academic corroboration

When evaluating claims:
1. Demand independent, diverse corroboration for sensitive topics
2. Treat official statements as claims to be checked, not as proof
3. Look for documents, data and on-record sources
4. Surface the policy and human impact of the claim

Respond with JSON only.""",
    EvaluatorProfile.SCHOLARLY.value: """\
You are a fact-checking evaluator with the perspective of a research librarian.

Editorial characteristics:
- Weighs peer-reviewed, institutional and primary data sources above commentary
- Distinguishes established findings from preliminary or contested results

When evaluating claims:
1. Prefer institutional, academic and official statistical sources
2. Note when a claim outruns what the cited research actually shows
3. Flag missing primary data

Respond with JSON only.""",
    EvaluatorProfile.GENERIC.value: """\
You are a neutral fact-checking evaluator focused purely on evidence-based verification.

Approach:
- No ideological or editorial bias
- Scientific method: claims require evidence proportional to their strength
- Prefer primary sources, wire services and established fact-checkers

When evaluating claims:
1. Cross-verify across independent sources
2. Defer to existing professional fact-checks when present
3. Separate what is established from what is merely reported

Respond with JSON only.""",
}

AGGREGATOR_PROMPT = """\
You are the orchestrator of a panel of fact-checking evaluators with different editorial perspectives.

Combine their reports into one final verdict:
- Weight each evaluator's verdict proportionally to its reputation score
- Evaluators citing more evidence and stronger sources raise confidence
- Disagreement between evaluators must be listed under remaining_uncertainties, never dropped
- Failed evaluators contribute nothing but their absence is an uncertainty

Include an accuracy_score (0-100) based on evidence strength. Respond with JSON only."""

GRAPH_PROMPT = """\
You are analyzing how a news claim propagated across sources.

Tasks:
1. Determine the likely original source from timestamps and citations
2. Map attribution relationships between sources
3. Flag misinformation amplification patterns

Use only the node ids you are given. Respond with JSON only."""

CLAIM_EXTRACTION_PROMPT = """\
You extract verifiable factual claims from news text. Ignore opinions and predictions.
Respond with JSON only."""


def _format_evidence(evidence: list[ScoredEvidence]) -> str:
    blocks = []
    for i, e in enumerate(evidence, start=1):
        blocks.append(
            f"[{i}] {e.get('title', '')}\n"
            f"URL: {e.get('url', '')}\n"
            f"Published: {e.get('publish_timestamp') or 'unknown'}\n"
            f"Snippet: {e.get('snippet', '')}\n"
            f"Reputation: {round(e.get('domain_score', 50))}/100"
        )
    return "\n\n".join(blocks) if blocks else "(no evidence retrieved)"


def _format_reports(reports: list[EvaluatorReport], reputations: dict[str, float]) -> str:
    blocks = []
    for r in reports:
        reputation = reputations.get(r["profile"], 50.0)
        status = "FAILED" if r.get("error") else "ok"
        blocks.append(
            f"EVALUATOR: {r['evaluator_name']} ({status})\n"
            f"Reputation Score: {reputation:.1f}/100\n"
            f"Credibility Score: {r['credibility_score']}/100\n"
            f"Confidence: {r['confidence']}\n"
            f"Verdict: {r['verdict']}\n"
            f"Evidence Links: {len(r.get('evidence_links', []))}\n"
            f"Summary: {r.get('summary', '')}\n"
            f"Key Findings: {', '.join(r.get('key_findings', [])) or 'None'}\n"
            f"Concerns: {', '.join(r.get('concerns', [])) or 'None'}"
        )
    return "\n\n---\n\n".join(blocks)


class AnthropicReasoningService:
    """Anthropic-backed implementation of the ReasoningService protocol."""

    def __init__(
        self,
        caller: ReasoningCaller,
        *,
        aggregator_caller: ReasoningCaller | None = None,
    ) -> None:
        self._caller = caller
        self._aggregator = aggregator_caller or caller
        self.usage: list[TokenUsage] = []

    async def assess(
        self, profile: str, claim: str, evidence: list[ScoredEvidence]
    ) -> dict[str, Any]:
        system = PROFILE_PROMPTS.get(profile, PROFILE_PROMPTS[EvaluatorProfile.GENERIC.value])
        user = f"""Analyze the following claim and evidence.

CLAIM: "{claim}"

EVIDENCE:
{_format_evidence(evidence)}

Return JSON:
{{
  "credibility_score": <0-100>,
  "confidence": <0-1>,
  "verdict": "<true|false|mixed|unknown>",
  "summary": "<brief summary>",
  "reasoning": "<detailed analysis>",
  "evidence_links": [<relevant URLs from the evidence>],
  "key_findings": [<key findings>],
  "concerns": [<concerns or red flags>]
}}"""
        data, usage = await self._caller.call_json(
            system=system,
            messages=[{"role": "user", "content": user}],
            agent_name=f"evaluator:{profile}",
            max_tokens=2000,
            temperature=0.3,
        )
        self.usage.append(usage)
        return data

    async def aggregate(
        self,
        reports: list[EvaluatorReport],
        reputations: dict[str, float],
        weighted_tally: dict[str, float],
    ) -> dict[str, Any]:
        tally = ", ".join(f"{k}={v:.2f}" for k, v in sorted(weighted_tally.items())) or "none"
        user = f"""Aggregate the following evaluator reports into a final verdict.

{_format_reports(reports, reputations)}

Reputation-weighted verdict support: {tally}

Return JSON:
{{
  "verdict": "<true|false|mixed|unknown>",
  "accuracy_score": <0-100>,
  "confidence": <0-1>,
  "summary": "<comprehensive summary>",
  "agent_consensus": "<description of evaluator agreement/disagreement>",
  "remaining_uncertainties": [<unresolved questions>]
}}"""
        data, usage = await self._aggregator.call_json(
            system=AGGREGATOR_PROMPT,
            messages=[{"role": "user", "content": user}],
            agent_name="aggregator",
            max_tokens=2000,
            temperature=0.2,
        )
        self.usage.append(usage)
        return data

    async def analyze_source_graph(self, claim: str, nodes: list[GraphNode]) -> dict[str, Any]:
        listing = "\n".join(
            f"{n['id']}: {n['title']} ({n['domain']}, {n['timestamp']}) role={n['role']}"
            for n in nodes
        )
        user = f"""CLAIM: "{claim}"

SOURCES:
{listing}

Return JSON:
{{
  "origin_node": "<node id>",
  "edges": [{{"from": "<node id>", "to": "<node id>",
             "relationship": "<cites|quotes|contradicts|amplifies|updates>",
             "evidence": "<one-line justification>"}}]
}}"""
        data, usage = await self._caller.call_json(
            system=GRAPH_PROMPT,
            messages=[{"role": "user", "content": user}],
            agent_name="graph_analysis",
            max_tokens=1500,
            temperature=0.2,
        )
        self.usage.append(usage)
        return data

    async def extract_claims(self, text: str) -> list[dict[str, Any]]:
        user = f"""Extract the main verifiable factual claims from this text.

TEXT:
{text[:6000]}

Return JSON: {{"claims": [{{"claim": "<claim>", "importance": <0-1>}}]}}"""
        data, usage = await self._caller.call_json(
            system=CLAIM_EXTRACTION_PROMPT,
            messages=[{"role": "user", "content": user}],
            agent_name="claim_extractor",
            max_tokens=1000,
        )
        self.usage.append(usage)
        claims = data.get("claims", []) if isinstance(data, dict) else data
        return [c for c in claims if isinstance(c, dict) and c.get("claim")]
