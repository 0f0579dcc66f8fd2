"""Request validation schemas generated from the table definitions.

Each insert schema is built mechanically from a model's columns: columns that
are NOT NULL without a default are required, everything else is optional,
enum columns accept only their declared values and server-assigned columns
(ids, timestamps) are left out. Payloads use the camelCase names the JSON
API exposes; timestamps carrying an offset are converted to naive UTC, the
form every DateTime column stores.
"""
from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, create_model
from sqlalchemy import JSON, DateTime, Enum

from .models import (
    Company,
    LanguageTutorial,
    ProgrammingLanguage,
    Question,
    Solution,
    Topic,
    User,
    UserProgress,
    as_naive_utc,
    to_camel,
)

SERVER_ASSIGNED = ("id", "created_at")


def _column_type(column):
    if "python_type" in column.info:
        return column.info["python_type"]
    if isinstance(column.type, Enum):
        return Literal[tuple(column.type.enums)]
    if isinstance(column.type, JSON):
        return Any
    if isinstance(column.type, DateTime):
        # stored as naive UTC
        return Annotated[datetime, AfterValidator(as_naive_utc)]
    return column.type.python_type


def create_insert_schema(model, omit=SERVER_ASSIGNED):
    fields = {}
    for column in model.__table__.columns:
        if column.key in omit:
            continue
        annotation = _column_type(column)
        has_default = column.default is not None or column.server_default is not None
        if not column.nullable and not has_default:
            fields[column.key] = (annotation, ...)
        elif column.nullable:
            fields[column.key] = (Optional[annotation], None)
        else:
            # NOT NULL with a default: may be omitted, but never null
            fields[column.key] = (annotation, None)
    return create_model(
        f"Insert{model.__name__}",
        __config__=ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore"),
        **fields,
    )


UpsertUserSchema = create_insert_schema(User, omit=("created_at", "updated_at"))
InsertCompanySchema = create_insert_schema(Company)
InsertProgrammingLanguageSchema = create_insert_schema(ProgrammingLanguage)
InsertTopicSchema = create_insert_schema(Topic)
InsertQuestionSchema = create_insert_schema(Question)
InsertSolutionSchema = create_insert_schema(Solution)
InsertUserProgressSchema = create_insert_schema(UserProgress, omit=("id", "created_at", "updated_at"))
InsertLanguageTutorialSchema = create_insert_schema(LanguageTutorial)


def parse(schema, payload):
    """Validate ``payload`` and return only the fields the caller supplied, snake_cased.

    Raises pydantic's ValidationError on bad input, including a missing or
    non-object body.
    """
    return schema.model_validate(payload).model_dump(exclude_unset=True)


class RequestBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ExplainCodeRequest(RequestBody):
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)


class VisualizeAlgorithmRequest(RequestBody):
    algorithm: str = Field(min_length=1)
    problem_description: str = Field(min_length=1)


class GenerateHintsRequest(RequestBody):
    problem_title: str = Field(min_length=1)
    problem_description: str = Field(min_length=1)
    difficulty: str = Field(min_length=1)


class RunCodeRequest(RequestBody):
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)
    stdin: str = ""
    question_id: Optional[str] = None


class SubmitCodeRequest(RequestBody):
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)
