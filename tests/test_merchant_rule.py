import json

import pytest

from ucsfe.model.merchant_rule import MerchantRuleConfig, Question, QuestionInfo
from ucsfe.model.template import DropdownItem


def make_config(questions_json):
    return MerchantRuleConfig(
        id=1,
        merchant_code="M1",
        binding_type="EMAIL",
        passing_score=60,
        empty_score=0,
        lock_hour=24,
        ip_retry_limit=5,
        account_retry_limit=3,
        questions_json=questions_json,
    )


def test_parse_questions_builds_map():
    raw = json.dumps(
        {
            "q1": {"fieldId": "q1", "fieldType": "Social", "valid": True, "score": 30},
            "q2": {"fieldId": "q2"},
        }
    )
    questions = make_config(raw).parse_questions()
    assert sorted(questions) == ["q1", "q2"]
    assert questions["q1"].valid is True
    assert questions["q1"].score == 30
    assert questions["q2"] == Question(field_id="q2")


@pytest.mark.parametrize("raw", [None, ""])
def test_parse_questions_empty(raw):
    with pytest.raises(ValueError, match="questions field is empty for merchant: M1"):
        make_config(raw).parse_questions()


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '{"q1": {"score": "high"}}'])
def test_parse_questions_invalid(raw):
    with pytest.raises(ValueError, match="unmarshal questions failed for merchant M1"):
        make_config(raw).parse_questions()


def test_question_round_trip():
    data = {
        "fieldId": "q1",
        "fieldName": "Name",
        "fieldAttribute": "I",
        "fieldType": "ID",
        "valid": True,
        "score": 10,
        "accuracy": "exact",
    }
    assert Question.from_dict(data).to_dict() == data


def test_question_score_out_of_range():
    with pytest.raises(ValueError):
        Question.from_dict({"score": 2**31})


@pytest.mark.parametrize("dropdown", [None, []])
def test_question_info_omits_empty_dropdown(dropdown):
    info = QuestionInfo("q1", "Name", "I", "ID", dropdown)
    assert "fieldDropdownList" not in info.to_dict()
    assert info.to_dict()["fieldId"] == "q1"


def test_question_info_includes_dropdown():
    info = QuestionInfo("q1", "Bank", "DD", "Financial", [DropdownItem("Alpha", 2)])
    assert info.to_dict()["fieldDropdownList"] == [{"dropdownValue": "Alpha", "dropdownId": 2}]