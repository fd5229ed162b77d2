from __future__ import annotations

"""
FastAPI application for the voter match engine.

- Loads question and candidate-position snapshots once at startup
- POST /match validates a completed quiz and returns the top matches
- Request problems map to 400, missing candidate data to 404, anything
  unexpected to a generic 500
"""

from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from .catalog import load_positions, load_questions
from .config import POSITIONS_PATH, QUESTIONS_PATH, CandidatePosition, HealthResponse, MatchResponse, Question
from .errors import MatchRequestError, NoCandidateDataError, SnapshotError
from .service import make_rng, run_match

# =============================================================================
# FastAPI app + startup
# =============================================================================

app = FastAPI(title="votematch")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_questions: List[Question] = []
_positions: List[CandidatePosition] = []
_rng = make_rng()


@app.on_event("startup")
def startup_event() -> None:
    global _questions, _positions
    logger.info("Starting app warmup...")
    try:
        _questions = load_questions(QUESTIONS_PATH)
    except SnapshotError as e:
        logger.warning("Questions not loaded: {}", e)
    try:
        _positions = load_positions(POSITIONS_PATH)
    except SnapshotError as e:
        logger.warning("Candidate positions not loaded: {}", e)
    logger.info("Warmup complete: questions={}, positions={}", len(_questions), len(_positions))


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


class MatchRequest(BaseModel):
    # items stay untyped so one bad answer is dropped instead of failing the request
    answers: Any = Field(default=None)


@app.post("/match", response_model=MatchResponse, response_model_by_alias=True)
def match(req: MatchRequest) -> MatchResponse:
    try:
        return run_match(req.answers, _positions, _questions, rng=_rng)
    except MatchRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoCandidateDataError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception("Match calculation failed")
        raise HTTPException(status_code=500, detail="Failed to calculate matches")
