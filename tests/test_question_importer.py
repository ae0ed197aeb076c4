"""
Unit Tests for the JSON question importer

Validation and normalization of raw question bank payloads.
"""

import copy
import json

import pytest

from config import DEFAULT_STEM, OPTION_PLACEHOLDER
from qcm_simulator.errors import ValidationError
from qcm_simulator.services.question_importer import normalize_questions, parse_exam_json

from conftest import make_raw_question


class TestNormalizeQuestions:
    """Tests for normalize_questions()."""

    # ─────────────────────────────────────────────────────────────────────────
    # Rejection
    # ─────────────────────────────────────────────────────────────────────────

    @pytest.mark.parametrize("payload", [None, {}, "[]", 42, {"questions": []}])
    def test_normalize_when_not_array_then_raises(self, payload):
        with pytest.raises(ValidationError, match="must be an array"):
            normalize_questions(payload)

    @pytest.mark.parametrize("element", [None, 3, "question", ["a", "b"]])
    def test_normalize_when_element_not_record_then_raises(self, element):
        with pytest.raises(ValidationError, match="Question 2 is invalid"):
            normalize_questions([make_raw_question(), element])

    @pytest.mark.parametrize("answer_index", [None, -1, 6, 2.5, "2", True])
    def test_normalize_when_answer_index_invalid_then_raises(self, answer_index):
        raw = make_raw_question(answer_index=answer_index)
        with pytest.raises(ValidationError, match="Question 1 is missing a valid answerIndex"):
            normalize_questions([raw])

    def test_normalize_when_answer_index_missing_then_rejects_whole_payload(self):
        raw = make_raw_question()
        del raw["answerIndex"]
        with pytest.raises(ValidationError):
            normalize_questions([make_raw_question(), make_raw_question(), raw])

    # ─────────────────────────────────────────────────────────────────────────
    # Normalization
    # ─────────────────────────────────────────────────────────────────────────

    def test_normalize_when_three_options_then_pads_to_six(self):
        raw = make_raw_question(options=["x", "y", "z"], answer_index=1)
        [question] = normalize_questions([raw])
        assert question.options == ["x", "y", "z"] + [OPTION_PLACEHOLDER] * 3
        assert question.answer_index == 1

    def test_normalize_when_more_than_six_options_then_truncates(self):
        raw = make_raw_question(options=list("abcdefgh"))
        [question] = normalize_questions([raw])
        assert question.options == list("abcdef")

    def test_normalize_when_options_missing_then_all_placeholders(self):
        raw = make_raw_question()
        del raw["options"]
        [question] = normalize_questions([raw])
        assert question.options == [OPTION_PLACEHOLDER] * 6

    def test_normalize_when_labels_missing_then_defaults(self):
        [question] = normalize_questions([{"answerIndex": 0}])
        assert question.category == ""
        assert question.drug == ""
        assert question.stem == DEFAULT_STEM

    def test_normalize_when_answer_index_is_integral_float_then_accepts(self):
        [question] = normalize_questions([make_raw_question(answer_index=5.0)])
        assert question.answer_index == 5

    def test_normalize_when_empty_array_then_returns_empty(self):
        assert normalize_questions([]) == []

    def test_normalize_keeps_input_order(self):
        payload = [make_raw_question(stem=f"Q{i}", answer_index=i % 6) for i in range(8)]
        result = normalize_questions(payload)
        assert [q.stem for q in result] == [f"Q{i}" for i in range(8)]

    def test_normalize_is_deterministic_and_does_not_mutate_input(self):
        payload = [make_raw_question(options=["a"]), make_raw_question(answer_index=3)]
        snapshot = copy.deepcopy(payload)
        first = normalize_questions(payload)
        second = normalize_questions(payload)
        assert first == second
        assert payload == snapshot


class TestParseExamJson:
    """Tests for parse_exam_json()."""

    def test_parse_when_valid_then_returns_questions(self):
        text = json.dumps([make_raw_question(answer_index=2)])
        [question] = parse_exam_json(text)
        assert question.answer_index == 2

    def test_parse_when_malformed_json_then_raises(self):
        with pytest.raises(ValidationError, match="Invalid JSON"):
            parse_exam_json("[{")

    def test_parse_when_empty_array_then_raises(self):
        with pytest.raises(ValidationError, match="No questions found"):
            parse_exam_json("[]")
