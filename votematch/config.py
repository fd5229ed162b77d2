from __future__ import annotations
"""
Configuration for the votematch scoring engine.
"""

import os
from pathlib import Path
from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, field_validator

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"
QUESTIONS_PATH = Path(os.getenv("QUESTIONS_PATH", str(DATA_DIR / "questions.json")))
POSITIONS_PATH = Path(os.getenv("POSITIONS_PATH", str(DATA_DIR / "positions.json")))

# Logging dir (created by the CLI when a file sink is requested)
LOG_DIR = PROJECT_ROOT / "logs"

# Topics
POLICY_AREAS: List[str] = [
    "economy",
    "healthcare",
    "education",
    "security",
    "environment",
    "social",
    "infrastructure",
]

POLICY_AREA_LABELS: Dict[str, str] = {
    "economy": "Economía",
    "healthcare": "Salud",
    "education": "Educación",
    "security": "Seguridad",
    "environment": "Medio Ambiente",
    "social": "Políticas Sociales",
    "infrastructure": "Infraestructura",
}

# Question types
AGREEMENT_SCALE = "agreement-scale"
SPECIFIC_CHOICE = "specific-choice"
QUESTION_TYPES: List[str] = [AGREEMENT_SCALE, SPECIFIC_CHOICE]
AGREEMENT_MIN = 1
AGREEMENT_MAX = 5

# Answer normalization
NEUTRAL_ANSWER = 0.5
NEUTRAL_TOLERANCE = 0.01

# Baseline (z-score) statistics
BASELINE_STD_FLOOR = 1e-3
BASELINE_MIN_SAMPLES = 2

# Rank points
RANK_POINTS_MAX = 100.0

# Jitter: +/-5% of the 0-100 scale, applied on the 0-1 alignment scale
JITTER_AMPLITUDE = 0.05
JITTER_ENABLED = os.getenv("MATCH_JITTER", "1").strip().lower() in {"1", "true", "yes", "on"}
_seed = os.getenv("MATCH_JITTER_SEED", "").strip()
JITTER_SEED = int(_seed) if _seed else None

# Pathway A (rank based)
RANK_WEIGHT = 0.7
VARIANCE_BONUS_MAX = 30.0
VARIANCE_BONUS_DECAY = 3.0

# Pathway B (consistency)
CONSISTENCY_MIN_WEIGHT = 0.4
CONSISTENCY_MEAN_WEIGHT = 0.6

# Comprehensiveness bonus, shared by A and B
COMPREHENSIVE_BONUS_MAX = 35.0
TOTAL_POLICY_AREAS = len(POLICY_AREAS)

SCORE_MIN = 0.0
SCORE_MAX = 100.0

# Request limits
DEFAULT_MAX_ANSWERS = 100
MAX_ANSWERS = int(os.getenv("MATCH_MAX_ANSWERS", str(DEFAULT_MAX_ANSWERS)))
DEFAULT_RETURN = int(os.getenv("MATCH_DEFAULT_RETURN", "10"))
API_HOST = os.getenv("VOTEMATCH_HOST", "127.0.0.1")
API_PORT = int(os.getenv("VOTEMATCH_PORT", "8000"))
QUESTIONS_MIN = 1
QUESTIONS_MAX = 100
QUESTIONS_DEFAULT = 20

# Audits
AUDIT_TOP_K = 5
AUDIT_STUCK_HIGH = 0.4
AUDIT_STUCK_LOW = 0.15
AUDIT_CV_TARGET = 50.0
AUDIT_PATTERNS: List[str] = [
    "strongly-agree",
    "strongly-disagree",
    "neutral",
    "progressive",
    "conservative",
    "moderate",
]


def _check_topic(value: str) -> str:
    topic = str(value).strip().lower()
    if topic not in POLICY_AREAS:
        raise ValueError(f"Invalid policy area: {value}")
    return topic


# Pydantic schemas
class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_id: str = Field(alias="questionId", min_length=1)
    topic: str = Field(alias="policyArea")
    text: str = ""
    type: str
    options: List[str] = Field(default_factory=list)
    embedding: List[float] = Field(min_length=1)
    weight: float = Field(default=1.0, ge=0)

    @field_validator("topic")
    @classmethod
    def valid_topic(cls, value: str) -> str:
        return _check_topic(value)


class CandidatePosition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    candidate_id: str = Field(alias="candidateId", min_length=1)
    topic: str = Field(alias="policyArea")
    name: str = ""
    party: str = ""
    position: str = ""
    embedding: List[float] = Field(min_length=1)

    @field_validator("topic")
    @classmethod
    def valid_topic(cls, value: str) -> str:
        return _check_topic(value)


class UserAnswer(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_id: str = Field(alias="questionId", min_length=1)
    topic: str = Field(alias="policyArea")
    # strict members keep booleans intact so the normalizer can reject them
    answer: Union[StrictBool, StrictInt, StrictFloat, StrictStr]
    embedding: List[float] = Field(alias="questionEmbedding", min_length=1)

    @field_validator("topic")
    @classmethod
    def valid_topic(cls, value: str) -> str:
        return _check_topic(value)


class CandidateMatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    candidate_id: str = Field(alias="candidateId")
    name: str
    party: str
    score: float = Field(ge=SCORE_MIN, le=SCORE_MAX)
    matched_positions: int = Field(alias="matchedPositions", ge=0)
    alignment_by_area: Dict[str, float] = Field(alias="alignmentByArea", default_factory=dict)


class MatchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    matches: List[CandidateMatch]
    total_candidates: int = Field(alias="totalCandidates", ge=0)
    questions_answered: int = Field(alias="questionsAnswered", ge=0)


class HealthResponse(BaseModel):
    status: str
