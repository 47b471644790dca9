"""CLI entry point: python -m claim_trail <command>"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from claim_trail.config import Settings, get_settings
from claim_trail.errors import ClaimTrailError, VerificationError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="claim-trail",
        description="Multi-evaluator claim verification with source graphs",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    verify = sub.add_parser("verify", help="Verify a claim or the main claim of an article")
    verify.add_argument("text", nargs="?", default=None, help="Claim text")
    verify.add_argument("--url", default=None, help="Article URL to verify")
    verify.add_argument(
        "--evaluators",
        default=None,
        help="Comma-separated evaluator profiles (default: from config)",
    )
    verify.add_argument(
        "--quick",
        action="store_true",
        help="Run only the baseline evaluator and print a compact result",
    )
    verify.add_argument("--json", action="store_true", help="Print the full result as JSON")
    verify.add_argument("--no-log", action="store_true", help="Disable the JSONL event log")

    lookup = sub.add_parser("lookup", help="Show a stored verification by graph hash")
    lookup.add_argument("hash", help="Graph hash (64 hex characters)")

    reputation = sub.add_parser("reputation", help="Leaderboard, or one evaluator's record")
    reputation.add_argument("name", nargs="?", default=None, help="Evaluator profile")
    reputation.add_argument("--limit", type=int, default=10, help="Leaderboard size")

    recent = sub.add_parser("recent", help="List recent verifications")
    recent.add_argument("--limit", type=int, default=10, help="Number of records (max 50)")

    sub.add_parser("status", help="Show available and default evaluators")

    return parser.parse_args(argv)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _print_result(result: dict) -> None:
    print(f"Verdict: {result['verdict']}  (accuracy {result['accuracy_score']:.0f}/100, "
          f"confidence {result['confidence']:.2f})")
    print(f"Claim: {result['claim']}")
    if result.get("summary"):
        print(f"Summary: {result['summary']}")
    for report in result["reports"]:
        status = "FAILED" if report.get("error") else report["verdict"]
        print(f"  - {report['evaluator_name']}: {status} ({report['credibility_score']:.0f})")
    for item in result.get("remaining_uncertainties", []):
        print(f"  ? {item}")
    print(f"Graph hash: {result['graph']['hash']}")
    if result.get("ledger_reference"):
        print(f"Ledger: {result['ledger_reference']}")


def _reputation_store(settings: Settings):
    from claim_trail.reputation.store import shared_reputation_store

    return shared_reputation_store(
        settings.data_dir,
        k_factor=settings.reputation_k_factor,
        decay_rate=settings.reputation_decay_rate,
        decay_period_days=settings.reputation_decay_period_days,
        history_limit=settings.reputation_history_limit,
    )


async def _verify(settings: Settings, args: argparse.Namespace) -> None:
    from claim_trail.pipeline.verifier import Verifier

    if not args.text and not args.url:
        print("ERROR: claim text or --url is required.", file=sys.stderr)
        sys.exit(1)

    errors = settings.validate()
    if errors:
        for err in errors:
            print(f"ERROR: {err}", file=sys.stderr)
        sys.exit(1)
    for warning in settings.warnings():
        print(f"WARNING: {warning}", file=sys.stderr)

    verifier = Verifier.from_settings(settings)
    verifier.enable_log = not args.no_log
    evaluators = [e.strip() for e in args.evaluators.split(",")] if args.evaluators else None

    try:
        if args.quick:
            compact = await verifier.verify_quick(url=args.url, text=args.text, source="cli")
            _print_json(compact)
            return
        result = await verifier.verify(
            url=args.url, text=args.text, evaluators=evaluators, source="cli"
        )
    except VerificationError as e:
        print(f"ERROR: {e.public_message()}", file=sys.stderr)
        sys.exit(1)
    except ClaimTrailError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await verifier.close()

    if args.json:
        _print_json(result)
    else:
        _print_result(result)


def _lookup(settings: Settings, graph_hash: str) -> None:
    from claim_trail.memory.store import RecordStore

    record = RecordStore(settings.data_dir).get_by_hash(graph_hash)
    if record is None:
        print(f"ERROR: No verification found for hash '{graph_hash}'", file=sys.stderr)
        sys.exit(1)
    _print_json(record)


def _reputation(settings: Settings, name: str | None, limit: int) -> None:
    store = _reputation_store(settings)
    if name:
        _print_json(store.insight(name))
        return
    board = store.leaderboard(limit)
    if not board:
        print("No reputation records found.", file=sys.stderr)
        return
    for rank, entry in enumerate(board, start=1):
        print(
            f"  {rank}. {entry['evaluator_name']:<15} {entry['current_score']:6.2f}  "
            f"({entry['correct_predictions']}/{entry['total_verifications']} agreed)"
        )


def _recent(settings: Settings, limit: int) -> None:
    from claim_trail.memory.store import RecordStore

    records = RecordStore(settings.data_dir).recent(limit)
    if not records:
        print("No verification records found.", file=sys.stderr)
        return
    for rec in records:
        print(f"  {rec['hash'][:12]}  [{rec['verdict']}]  {rec.get('accuracy_score', 0):.0f}  {rec['created_at']}")
        print(f"    C: {rec['claim']}")


def _status(settings: Settings) -> None:
    from claim_trail.evaluators import available_evaluators

    _print_json(
        {
            "available_evaluators": available_evaluators(),
            "default_evaluators": list(settings.default_evaluators),
            "quick_evaluator": settings.quick_evaluator,
            "ledger_dry_run": settings.ledger_dry_run,
        }
    )


async def run(args: argparse.Namespace) -> None:
    settings = get_settings()

    if args.command == "verify":
        await _verify(settings, args)
    elif args.command == "lookup":
        _lookup(settings, args.hash)
    elif args.command == "reputation":
        _reputation(settings, args.name, args.limit)
    elif args.command == "recent":
        _recent(settings, args.limit)
    elif args.command == "status":
        _status(settings)


def main() -> None:
    args = parse_args()
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
