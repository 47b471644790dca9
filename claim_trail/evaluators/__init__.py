"""Evaluator registry. Profiles register themselves on import of .profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from claim_trail.contracts import ReasoningService

    from .base import Evaluator

_REGISTRY: dict[str, type] = {}


def register_evaluator(name: str, cls: type) -> None:
    _REGISTRY[name] = cls


def _ensure_loaded() -> None:
    import claim_trail.evaluators.profiles  # noqa: F401


def get_evaluator(name: str, reasoning: "ReasoningService") -> "Evaluator":
    _ensure_loaded()
    key = (name or "").strip().lower()
    if key not in _REGISTRY:
        available = ", ".join(_REGISTRY) or "(none)"
        raise KeyError(f"Unknown evaluator {name!r}. Available: {available}")
    return _REGISTRY[key](reasoning)


def available_evaluators() -> list[str]:
    _ensure_loaded()
    return list(_REGISTRY)


def build_evaluators(reasoning: "ReasoningService") -> dict[str, "Evaluator"]:
    """Instantiate every registered profile against one reasoning service."""
    _ensure_loaded()
    return {name: cls(reasoning) for name, cls in _REGISTRY.items()}
