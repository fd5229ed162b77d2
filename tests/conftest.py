"""
Pytest configuration and shared fixtures.

Embeddings in the fixtures are 2-d: every question points along
``[1, 0]`` and a position with target similarity ``s`` is
``[s, sqrt(1 - s^2)]``, so the cosine similarity is exactly ``s``.
"""

import math
from typing import Any, Callable, Dict, List

import pytest
from loguru import logger

from votematch.config import AGREEMENT_SCALE, CandidatePosition, Question, UserAnswer

QUESTION_VECTOR = [1.0, 0.0]


def vector_with_similarity(s: float) -> List[float]:
    return [s, math.sqrt(max(0.0, 1.0 - s * s))]


@pytest.fixture
def make_question() -> Callable[..., Question]:
    def _make(qid: str, topic: str, **kwargs: Any) -> Question:
        data: Dict[str, Any] = {
            "question_id": qid,
            "topic": topic,
            "text": f"Question {qid}",
            "type": AGREEMENT_SCALE,
            "embedding": QUESTION_VECTOR,
        }
        data.update(kwargs)
        return Question(**data)

    return _make


@pytest.fixture
def make_position() -> Callable[..., CandidatePosition]:
    def _make(cid: str, topic: str, similarity: float, **kwargs: Any) -> CandidatePosition:
        data: Dict[str, Any] = {
            "candidate_id": cid,
            "topic": topic,
            "name": f"Candidate {cid}",
            "party": f"Party {cid}",
            "position": f"{cid} on {topic}",
            "embedding": vector_with_similarity(similarity),
        }
        data.update(kwargs)
        return CandidatePosition(**data)

    return _make


@pytest.fixture
def make_answer() -> Callable[..., UserAnswer]:
    def _make(qid: str, topic: str, answer: Any, **kwargs: Any) -> UserAnswer:
        data: Dict[str, Any] = {
            "question_id": qid,
            "topic": topic,
            "answer": answer,
            "embedding": QUESTION_VECTOR,
        }
        data.update(kwargs)
        return UserAnswer(**data)

    return _make


@pytest.fixture
def triangle_positions(make_position) -> List[CandidatePosition]:
    """Three candidates, each strongest on a different topic."""
    sims = {
        "x": (0.9, 0.5, 0.1),
        "y": (0.1, 0.9, 0.5),
        "z": (0.5, 0.1, 0.9),
    }
    topics = ("economy", "healthcare", "education")
    return [
        make_position(cid, topic, s)
        for cid, values in sims.items()
        for topic, s in zip(topics, values)
    ]


@pytest.fixture
def triangle_questions(make_question) -> List[Question]:
    return [
        make_question("q1", "economy"),
        make_question("q2", "healthcare"),
        make_question("q3", "education"),
    ]


@pytest.fixture
def raw_answer() -> Dict[str, Any]:
    """A valid answer as it arrives in an HTTP body."""
    return {
        "questionId": "q1",
        "policyArea": "economy",
        "answer": 5,
        "questionEmbedding": QUESTION_VECTOR,
    }


@pytest.fixture
def log_messages():
    """Capture loguru output at WARNING and above as plain strings."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
