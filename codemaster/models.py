from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import event
from sqlalchemy.engine import Engine
from datetime import datetime, timezone
from typing import List
import sqlite3
import uuid

db = SQLAlchemy()

QUESTION_DIFFICULTIES = ("Easy", "Medium", "Hard")
TUTORIAL_DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")


def utcnow():
    # naive UTC so values compare equally after a SQLite round trip
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value):
    """Normalise an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def new_id():
    return str(uuid.uuid4())


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class SerializerMixin:
    """JSON shape of a row: every column, camelCase keys, ISO timestamps in UTC."""

    def to_dict(self):
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.replace(tzinfo=timezone.utc).isoformat()
            data[to_camel(column.key)] = value
        return data


class StoredSession(db.Model):
    __tablename__ = "sessions"
    sid = db.Column(db.String(255), primary_key=True)
    sess = db.Column(db.JSON, nullable=False)
    expire = db.Column(db.DateTime, nullable=False)

    __table_args__ = (db.Index("IDX_session_expire", "expire"),)


class User(SerializerMixin, UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.String(255), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True)
    first_name = db.Column(db.String(255))
    last_name = db.Column(db.String(255))
    profile_image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    progress = db.relationship("UserProgress", back_populates="user")


class Company(SerializerMixin, db.Model):
    __tablename__ = "companies"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(120), unique=True, nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    color = db.Column(db.String(30), nullable=False)
    logo = db.Column(db.String(300))
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)

    questions = db.relationship("Question", back_populates="company")


class ProgrammingLanguage(SerializerMixin, db.Model):
    __tablename__ = "programming_languages"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(80), unique=True, nullable=False)
    slug = db.Column(db.String(80), unique=True, nullable=False)
    icon = db.Column(db.String(120))
    color = db.Column(db.String(30), nullable=False)
    description = db.Column(db.Text)
    syntax_highlight = db.Column(db.String(40), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    solutions = db.relationship("Solution", back_populates="language")
    tutorials = db.relationship("LanguageTutorial", back_populates="language")


class Topic(SerializerMixin, db.Model):
    __tablename__ = "topics"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(120), unique=True, nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)

    questions = db.relationship("Question", back_populates="topic")


class Question(SerializerMixin, db.Model):
    __tablename__ = "questions"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=False)
    difficulty = db.Column(
        db.Enum(*QUESTION_DIFFICULTIES, name="question_difficulty", native_enum=False),
        nullable=False,
    )
    company_id = db.Column(db.String(36), db.ForeignKey("companies.id"))
    topic_id = db.Column(db.String(36), db.ForeignKey("topics.id"))
    time_complexity = db.Column(db.String(60))
    space_complexity = db.Column(db.String(60))
    hints = db.Column(db.JSON, info={"python_type": List[str]})  # list of strings
    test_cases = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=utcnow)

    company = db.relationship("Company", back_populates="questions")
    topic = db.relationship("Topic", back_populates="questions")
    solutions = db.relationship("Solution", back_populates="question")
    user_progress = db.relationship("UserProgress", back_populates="question")


class Solution(SerializerMixin, db.Model):
    __tablename__ = "solutions"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    question_id = db.Column(db.String(36), db.ForeignKey("questions.id"), nullable=False)
    language_id = db.Column(db.String(36), db.ForeignKey("programming_languages.id"), nullable=False)
    code = db.Column(db.Text, nullable=False)
    explanation = db.Column(db.Text)
    is_optimal = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    question = db.relationship("Question", back_populates="solutions")
    language = db.relationship("ProgrammingLanguage", back_populates="solutions")


class UserProgress(SerializerMixin, db.Model):
    __tablename__ = "user_progress"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(255), db.ForeignKey("users.id"), nullable=False)
    question_id = db.Column(db.String(36), db.ForeignKey("questions.id"), nullable=False)
    solved = db.Column(db.Boolean, default=False)
    attempts = db.Column(db.Integer, default=0)
    last_attempt_at = db.Column(db.DateTime)
    best_time = db.Column(db.Integer)  # milliseconds
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    user = db.relationship("User", back_populates="progress")
    question = db.relationship("Question", back_populates="user_progress")

    __table_args__ = (db.UniqueConstraint("user_id", "question_id", name="uq_user_progress_user_question"),)


class LanguageTutorial(SerializerMixin, db.Model):
    __tablename__ = "language_tutorials"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    language_id = db.Column(db.String(36), db.ForeignKey("programming_languages.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    order = db.Column(db.Integer, nullable=False)
    difficulty = db.Column(
        db.Enum(*TUTORIAL_DIFFICULTIES, name="tutorial_difficulty", native_enum=False),
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=utcnow)

    language = db.relationship("ProgrammingLanguage", back_populates="tutorials")

    __table_args__ = (db.UniqueConstraint("language_id", "slug", name="uq_language_tutorial_slug"),)
