from datetime import datetime

import pytest
from pydantic import ValidationError

from codemaster.schemas import (
    InsertCompanySchema,
    InsertLanguageTutorialSchema,
    InsertQuestionSchema,
    InsertSolutionSchema,
    InsertUserProgressSchema,
    UpsertUserSchema,
    parse,
)


def test_company_schema_requires_not_null_columns():
    with pytest.raises(ValidationError) as excinfo:
        parse(InsertCompanySchema, {"name": "Google", "slug": "google"})
    assert excinfo.value.errors()[0]["loc"] == ("color",)


def test_server_assigned_fields_are_not_accepted():
    data = parse(
        InsertCompanySchema,
        {"id": "forged", "createdAt": "2020-01-01T00:00:00", "name": "Google", "slug": "google", "color": "#4285f4"},
    )
    assert data == {"name": "Google", "slug": "google", "color": "#4285f4"}


def test_camel_case_payload_maps_to_columns():
    data = parse(
        InsertQuestionSchema,
        {
            "title": "Two Sum",
            "slug": "two-sum",
            "description": "Find two numbers.",
            "difficulty": "Medium",
            "companyId": "c-1",
            "timeComplexity": "O(n)",
            "hints": ["Use a map"],
            "testCases": [{"input": "[1,2], 3", "expected": "[0,1]"}],
        },
    )
    assert data["company_id"] == "c-1"
    assert data["time_complexity"] == "O(n)"
    assert data["test_cases"] == [{"input": "[1,2], 3", "expected": "[0,1]"}]
    assert "topic_id" not in data


def test_difficulty_must_be_a_declared_value():
    payload = {"title": "X", "slug": "x", "description": "x", "difficulty": "Impossible"}
    with pytest.raises(ValidationError):
        parse(InsertQuestionSchema, payload)

    tutorial = {"languageId": "l-1", "title": "T", "slug": "t", "content": "", "order": 1, "difficulty": "Expert"}
    with pytest.raises(ValidationError):
        parse(InsertLanguageTutorialSchema, tutorial)


def test_hints_must_be_strings():
    payload = {"title": "X", "slug": "x", "description": "x", "difficulty": "Easy", "hints": [{"text": "no"}]}
    with pytest.raises(ValidationError):
        parse(InsertQuestionSchema, payload)


def test_omitted_defaults_are_left_to_the_database():
    data = parse(InsertSolutionSchema, {"questionId": "q-1", "languageId": "l-1", "code": "pass"})
    assert data == {"question_id": "q-1", "language_id": "l-1", "code": "pass"}


def test_user_progress_schema_omits_timestamps_and_requires_keys():
    with pytest.raises(ValidationError):
        parse(InsertUserProgressSchema, {"solved": True})

    data = parse(
        InsertUserProgressSchema,
        {"userId": "u-1", "questionId": "q-1", "attempts": 2, "updatedAt": "2020-01-01T00:00:00", "bestTime": 120},
    )
    assert data == {"user_id": "u-1", "question_id": "q-1", "attempts": 2, "best_time": 120}
    assert "updated_at" not in InsertUserProgressSchema.model_fields


def test_offset_timestamps_become_naive_utc():
    data = parse(
        InsertUserProgressSchema,
        {"userId": "u-1", "questionId": "q-1", "lastAttemptAt": "2024-05-01T10:00:00+02:00"},
    )
    assert data["last_attempt_at"] == datetime(2024, 5, 1, 8, 0, 0)
    assert data["last_attempt_at"].tzinfo is None

    data = parse(InsertUserProgressSchema, {"userId": "u-1", "questionId": "q-1", "lastAttemptAt": "2024-05-01T10:00:00Z"})
    assert data["last_attempt_at"] == datetime(2024, 5, 1, 10, 0, 0)

    data = parse(InsertUserProgressSchema, {"userId": "u-1", "questionId": "q-1", "lastAttemptAt": "2024-05-01T10:00:00"})
    assert data["last_attempt_at"] == datetime(2024, 5, 1, 10, 0, 0)


def test_upsert_user_schema_keeps_the_provider_id():
    data = parse(UpsertUserSchema, {"id": "sub-1", "email": "a@example.com", "profileImageUrl": None})
    assert data == {"id": "sub-1", "email": "a@example.com", "profile_image_url": None}


@pytest.mark.parametrize("payload", [None, [], "company"])
def test_non_object_bodies_are_rejected(payload):
    with pytest.raises(ValidationError):
        parse(InsertCompanySchema, payload)
