"""Tests for boundary mapping of raw records."""

import numpy as np
import pytest
from pydantic import ValidationError

from votematch.mapping import map_answers, map_positions, map_questions, to_answer, to_position, to_question
from votematch.normalize import normalize_answer


@pytest.fixture
def raw_question():
    return {
        "questionId": "q1",
        "policyArea": "Economy",
        "text": "Should taxes go down?",
        "type": "agreement-scale",
        "embedding": [0.1, 0.2, 0.3],
    }


@pytest.fixture
def raw_position():
    return {
        "candidateId": "c1",
        "policyArea": "economy",
        "name": "Ana",
        "party": "Blue",
        "position": "Lower taxes for small businesses",
        "embedding": [0.3, 0.2, 0.1],
    }


class TestToQuestion:
    def test_camel_case_record(self, raw_question):
        q = to_question(raw_question)
        assert q.question_id == "q1"
        assert q.topic == "economy"
        assert q.weight == 1.0

    def test_snake_case_record(self, raw_question):
        raw = {
            "question_id": "q1",
            "topic": "economy",
            "text": "x",
            "type": "agreement-scale",
            "embedding": [1.0],
        }
        assert to_question(raw).question_id == "q1"

    def test_numpy_embedding_and_int_id(self, raw_question):
        raw_question["embedding"] = np.array([0.5, 0.5])
        raw_question["questionId"] = 17
        q = to_question(raw_question)
        assert q.embedding == [0.5, 0.5]
        assert q.question_id == "17"

    def test_json_string_embedding(self, raw_question):
        raw_question["embedding"] = "[0.5, 0.25]"
        assert to_question(raw_question).embedding == [0.5, 0.25]

    def test_unknown_topic(self, raw_question):
        raw_question["policyArea"] = "space"
        with pytest.raises(ValidationError):
            to_question(raw_question)

    def test_text_is_optional(self, raw_question):
        del raw_question["text"]
        assert to_question(raw_question).text == ""

    def test_invalid_type(self, raw_question):
        raw_question["type"] = "ranking"
        with pytest.raises(ValueError):
            to_question(raw_question)

    def test_single_option_choice(self, raw_question):
        raw_question["type"] = "specific-choice"
        raw_question["options"] = ["only"]
        question = to_question(raw_question)
        assert question.options == ["only"]
        assert normalize_answer("only", question) == 1.0

    def test_choice_needs_an_option(self, raw_question):
        raw_question["type"] = "specific-choice"
        raw_question["options"] = []
        with pytest.raises(ValueError):
            to_question(raw_question)

    def test_empty_embedding(self, raw_question):
        raw_question["embedding"] = []
        with pytest.raises(ValidationError):
            to_question(raw_question)

    def test_nan_embedding(self, raw_question):
        raw_question["embedding"] = [0.1, float("nan")]
        with pytest.raises(ValueError):
            to_question(raw_question)


class TestToPosition:
    def test_valid(self, raw_position):
        p = to_position(raw_position)
        assert (p.candidate_id, p.topic, p.name) == ("c1", "economy", "Ana")

    def test_empty_position_text(self, raw_position):
        raw_position["position"] = ""
        with pytest.raises(ValueError):
            to_position(raw_position)

    def test_missing_candidate_id(self, raw_position):
        del raw_position["candidateId"]
        with pytest.raises(ValidationError):
            to_position(raw_position)


class TestToAnswer:
    def test_valid(self, raw_answer):
        a = to_answer(raw_answer)
        assert a.answer == 5
        assert a.embedding == [1.0, 0.0]

    def test_string_answer(self, raw_answer):
        raw_answer["answer"] = "Yes"
        assert to_answer(raw_answer).answer == "Yes"

    def test_bool_answer_stays_bool(self, raw_answer, make_question):
        answer = to_answer(dict(raw_answer, answer=True))
        assert answer.answer is True
        assert normalize_answer(answer.answer, make_question("q1", "economy")) == 0.5

    def test_integral_answer_stays_int(self, raw_answer):
        assert type(to_answer(dict(raw_answer, answer=np.int64(4))).answer) is int

    def test_missing_answer(self, raw_answer):
        raw_answer["answer"] = None
        with pytest.raises(ValueError):
            to_answer(raw_answer)

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            to_answer(["q1", 5])


class TestBatchMapping:
    def test_invalid_records_dropped(self, raw_question, log_messages):
        bad = dict(raw_question, type="ranking")
        questions = map_questions([raw_question, bad])
        assert [q.question_id for q in questions] == ["q1"]
        assert any("Dropping invalid question" in m for m in log_messages)

    def test_single_option_and_textless_questions_kept(self, raw_question):
        choice = dict(raw_question, type="specific-choice", options=["yes"])
        textless = {k: v for k, v in raw_question.items() if k != "text"}
        textless["questionId"] = "q2"
        assert [q.question_id for q in map_questions([choice, textless])] == ["q1", "q2"]

    def test_positions(self, raw_position):
        other = dict(raw_position, candidateId="c2")
        assert [p.candidate_id for p in map_positions([raw_position, other])] == ["c1", "c2"]

    def test_answers_report_invalid_count(self, raw_answer):
        valid, invalid = map_answers([raw_answer, {"questionId": "q2"}, "junk"])
        assert len(valid) == 1
        assert invalid == 2
