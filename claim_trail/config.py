"""Settings loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from claim_trail.contracts import EvaluatorProfile


def _load_env() -> None:
    """Load .env from project root if it exists."""
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)


_load_env()


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    # API Keys
    anthropic_api_key: str = field(default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", ""))
    tavily_api_key: str = field(default_factory=lambda: os.environ.get("TAVILY_API_KEY", ""))

    # Models
    reasoning_model: str = field(
        default_factory=lambda: os.environ.get("REASONING_MODEL", "claude-sonnet-4-6")
    )
    aggregator_model: str = field(
        default_factory=lambda: os.environ.get("AGGREGATOR_MODEL", "claude-opus-4-6")
    )
    fallback_model: str = field(
        default_factory=lambda: os.environ.get("FALLBACK_MODEL", "claude-haiku-4-5-20251001")
    )

    # Concurrency + timeouts
    max_concurrent_evaluators: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONCURRENT_EVALUATORS", "4"))
    )
    max_concurrent_requests: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONCURRENT_REQUESTS", "5"))
    )
    evaluator_timeout: float = field(
        default_factory=lambda: float(os.environ.get("EVALUATOR_TIMEOUT", "90"))
    )
    max_retries: int = field(default_factory=lambda: int(os.environ.get("MAX_RETRIES", "3")))

    # Evaluators
    default_evaluators: list[str] = field(
        default_factory=lambda: _env_list("DEFAULT_EVALUATORS", "mainstream,investigative,generic")
    )
    quick_evaluator: str = field(
        default_factory=lambda: os.environ.get("QUICK_EVALUATOR", "generic")
    )

    # Retrieval
    max_evidence_results: int = field(
        default_factory=lambda: int(os.environ.get("MAX_EVIDENCE_RESULTS", "8"))
    )

    # Reputation
    reputation_k_factor: float = field(
        default_factory=lambda: float(os.environ.get("REPUTATION_K_FACTOR", "32"))
    )
    reputation_decay_rate: float = field(
        default_factory=lambda: float(os.environ.get("REPUTATION_DECAY_RATE", "0.01"))
    )
    reputation_decay_period_days: int = field(
        default_factory=lambda: int(os.environ.get("REPUTATION_DECAY_PERIOD_DAYS", "7"))
    )
    reputation_history_limit: int = field(
        default_factory=lambda: int(os.environ.get("REPUTATION_HISTORY_LIMIT", "100"))
    )

    # Storage
    data_dir: str = field(default_factory=lambda: os.environ.get("DATA_DIR", "data/"))
    run_log_dir: str = field(default_factory=lambda: os.environ.get("RUN_LOG_DIR", "runs/"))
    require_durability: bool = field(
        default_factory=lambda: _env_bool("REQUIRE_DURABILITY", "false")
    )

    # Ledger
    ledger_dry_run: bool = field(default_factory=lambda: _env_bool("LEDGER_DRY_RUN", "true"))
    ledger_url: str = field(default_factory=lambda: os.environ.get("LEDGER_URL", ""))
    ledger_api_key: str = field(default_factory=lambda: os.environ.get("LEDGER_API_KEY", ""))
    ledger_provider: str = field(
        default_factory=lambda: os.environ.get("LEDGER_PROVIDER", "polygon")
    )

    # Source graph
    graph_ai_enhance: bool = field(default_factory=lambda: _env_bool("GRAPH_AI_ENHANCE", "true"))

    # Diagnostics
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "false"))

    def validate(self) -> list[str]:
        """Return list of validation errors. Empty list means valid."""
        errors = []
        if not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY is required")
        if self.max_concurrent_evaluators < 1:
            errors.append("MAX_CONCURRENT_EVALUATORS must be >= 1")
        if self.max_concurrent_requests < 1:
            errors.append("MAX_CONCURRENT_REQUESTS must be >= 1")
        if self.evaluator_timeout <= 0:
            errors.append("EVALUATOR_TIMEOUT must be > 0")
        if self.max_retries < 1:
            errors.append("MAX_RETRIES must be >= 1")

        known = {p.value for p in EvaluatorProfile}
        unknown = [name for name in self.default_evaluators if name not in known]
        if unknown:
            errors.append(f"DEFAULT_EVALUATORS contains unknown evaluators: {', '.join(unknown)}")
        if self.quick_evaluator not in known:
            errors.append(f"QUICK_EVALUATOR must be one of {sorted(known)}, got '{self.quick_evaluator}'")

        if not 0 <= self.reputation_decay_rate < 1:
            errors.append("REPUTATION_DECAY_RATE must be in [0, 1)")
        if self.reputation_decay_period_days < 1:
            errors.append("REPUTATION_DECAY_PERIOD_DAYS must be >= 1")
        if self.reputation_history_limit < 1:
            errors.append("REPUTATION_HISTORY_LIMIT must be >= 1")
        if not self.ledger_dry_run and not self.ledger_url:
            errors.append("LEDGER_URL is required when LEDGER_DRY_RUN is 'false'")
        return errors

    def warnings(self) -> list[str]:
        """Return list of non-fatal configuration warnings."""
        warns: list[str] = []
        if not self.tavily_api_key:
            warns.append(
                "TAVILY_API_KEY is not set. Evidence must be supplied by the caller."
            )
        if self.evaluator_timeout < 15:
            warns.append(
                f"EVALUATOR_TIMEOUT={self.evaluator_timeout}s is aggressive. "
                "Reasoning calls with large evidence sets can be slow, consider >= 30s."
            )
        return warns


def get_settings() -> Settings:
    """Create Settings from current environment."""
    return Settings()
