"""
Batch runner for the voter match engine.
Runs a match or one of the audits against the snapshots, or serves the HTTP API.

- match: score one answers file and print the top candidates
- audit-fairness: random profiles, distribution of first place
- audit-coverage: systematic + random profiles until every candidate has won
- serve: run the FastAPI app under uvicorn
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import uvicorn
from loguru import logger

from .audit import audit_coverage, audit_fairness
from .catalog import load_positions, load_questions, load_records
from .config import (
    API_HOST,
    API_PORT,
    DEFAULT_RETURN,
    LOG_DIR,
    POLICY_AREA_LABELS,
    POSITIONS_PATH,
    QUESTIONS_DEFAULT,
    QUESTIONS_MAX,
    QUESTIONS_MIN,
    QUESTIONS_PATH,
)
from .errors import VoteMatchError
from .selection import select_random_questions
from .service import make_rng, run_match


def configure_logging(level: str = "INFO") -> None:
    """Console sink at ``level`` plus a rotating file sink under LOG_DIR."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(LOG_DIR / "votematch.log", level="DEBUG", rotation="10 MB", retention=5)


def _cmd_match(args: argparse.Namespace) -> int:
    questions = load_questions(Path(args.questions_path))
    positions = load_positions(Path(args.positions_path))
    raw = load_records(Path(args.answers))
    rng = make_rng(enabled=not args.no_jitter, seed=args.seed)
    response = run_match(raw, positions, questions, limit=args.top, rng=rng)

    df = pd.DataFrame(
        [
            {
                "candidate": m.name or m.candidate_id,
                "party": m.party,
                "score": round(m.score, 1),
                "matched": m.matched_positions,
            }
            for m in response.matches
        ]
    )
    print(f"Answered {response.questions_answered} questions, {response.total_candidates} candidates")
    print(df.to_string(index=False) if not df.empty else "(no matches)")
    if response.matches:
        top = response.matches[0]
        print(f"Alignment by area for {top.name or top.candidate_id}:")
        for area, points in top.alignment_by_area.items():
            print(f"  {POLICY_AREA_LABELS.get(area, area):<20} {points:6.1f}")
    return 0


def _quiz_length(value: str) -> int:
    n = int(value)
    if not QUESTIONS_MIN <= n <= QUESTIONS_MAX:
        raise argparse.ArgumentTypeError(f"quiz length must be between {QUESTIONS_MIN} and {QUESTIONS_MAX}")
    return n


def _cmd_audit_fairness(args: argparse.Namespace) -> int:
    rng = np.random.default_rng(args.seed)
    questions = select_random_questions(load_questions(Path(args.questions_path)), args.questions, rng)
    positions = load_positions(Path(args.positions_path))
    print(f"Fairness audit: {len(questions)} questions, {args.tests} tests")

    report = audit_fairness(questions, positions, args.tests, rng)
    print(report.table.round(1).to_string(index=False))
    print(f"Win CV: {report.cv:.1f}%  (target < 50%)")
    print(f"Top-5 rotation CV: {report.top_k_cv:.1f}%")
    print(f"Stuck at top: {report.stuck_at_top}  Stuck at bottom: {report.stuck_at_bottom}")
    print("PASS" if report.passed else "FAIL")
    return 0 if report.passed else 1


def _cmd_audit_coverage(args: argparse.Namespace) -> int:
    rng = np.random.default_rng(args.seed)
    questions = load_questions(Path(args.questions_path))
    positions = load_positions(Path(args.positions_path))

    report = audit_coverage(questions, positions, args.tests, rng)
    names = {p.candidate_id: p.name for p in positions}
    rows = [
        {"candidate": names.get(cid) or cid, "ranked_first": cid in report.ranked_first}
        for cid in dict.fromkeys(p.candidate_id for p in positions)
    ]
    print(pd.DataFrame(rows).to_string(index=False))
    for pattern, winner in report.pattern_winners.items():
        print(f"{pattern:>18}: {names.get(winner) or winner}")
    print(f"Coverage: {len(report.ranked_first)}/{report.total_candidates} ({report.coverage:.1f}%) after {report.tests_run} tests")
    print("PASS" if report.passed else "FAIL")
    return 0 if report.passed else 1


def _cmd_serve(args: argparse.Namespace) -> int:
    logger.info("Serving votematch API on {}:{}", args.host, args.port)
    uvicorn.run("votematch.api:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="votematch", allow_abbrev=False)
    ap.add_argument("--questions-path", default=str(QUESTIONS_PATH), help="questions snapshot")
    ap.add_argument("--positions-path", default=str(POSITIONS_PATH), help="candidate positions snapshot")
    ap.add_argument("--log-level", default="INFO")
    sub = ap.add_subparsers(dest="command", required=True)

    m = sub.add_parser("match", help="score one set of answers")
    m.add_argument("--answers", required=True, help="answers file (json/jsonl/csv/parquet)")
    m.add_argument("--top", type=int, default=DEFAULT_RETURN, help=f"matches to print (default {DEFAULT_RETURN})")
    m.add_argument("--seed", type=int, default=None, help="jitter seed")
    m.add_argument("--no-jitter", action="store_true", help="disable rank jitter")
    m.set_defaults(func=_cmd_match)

    f = sub.add_parser("audit-fairness", help="distribution of first place over random profiles")
    f.add_argument("--questions", type=_quiz_length, default=QUESTIONS_DEFAULT, help="quiz length")
    f.add_argument("--tests", type=int, default=1000)
    f.add_argument("--seed", type=int, default=None)
    f.set_defaults(func=_cmd_audit_fairness)

    c = sub.add_parser("audit-coverage", help="check every candidate can rank first")
    c.add_argument("--tests", type=int, default=5000, help="max random tests")
    c.add_argument("--seed", type=int, default=None)
    c.set_defaults(func=_cmd_audit_coverage)

    s = sub.add_parser("serve", help="run the HTTP API")
    s.add_argument("--host", default=API_HOST)
    s.add_argument("--port", type=int, default=API_PORT)
    s.set_defaults(func=_cmd_serve)
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.func(args)
    except VoteMatchError as e:
        logger.error("{}", e)
        print(f"[ERROR] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
