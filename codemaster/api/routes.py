from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..models import db, utcnow
from ..runner import summarize
from ..schemas import (
    InsertCompanySchema,
    InsertLanguageTutorialSchema,
    InsertProgrammingLanguageSchema,
    InsertQuestionSchema,
    InsertSolutionSchema,
    InsertTopicSchema,
    InsertUserProgressSchema,
    RunCodeRequest,
    SubmitCodeRequest,
    parse,
)
from ..storage import storage

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _storage_failure(message):
    """Roll back the request's session and log; call from inside an except block."""
    db.session.rollback()
    current_app.logger.exception(message)
    return {"message": message}, 500


def _validated(schema, message, **overrides):
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        payload = {**payload, **overrides}
    try:
        return parse(schema, payload), None
    except ValidationError as e:
        current_app.logger.info("%s: %s", message, e.errors())
        return None, ({"message": message}, 400)


def _create(schema, create, message, **overrides):
    data, error = _validated(schema, message, **overrides)
    if error:
        return error
    try:
        row = create(data)
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("%s: integrity violation", message, exc_info=True)
        return {"message": message}, 400
    except SQLAlchemyError:
        return _storage_failure(message)
    return row.to_dict(), 201


def _listing(fetch, message, *args):
    try:
        rows = fetch(*args)
    except SQLAlchemyError:
        return _storage_failure(message)
    return jsonify([row.to_dict() for row in rows])


def _detail(fetch, message, not_found, *args):
    try:
        row = fetch(*args)
    except SQLAlchemyError:
        return _storage_failure(message)
    if row is None:
        return {"message": not_found}, 404
    return row.to_dict()


# ---- Companies
@api_bp.get("/companies")
def list_companies():
    return _listing(storage.get_companies, "Failed to fetch companies")


@api_bp.get("/companies/<slug>")
def get_company(slug):
    return _detail(storage.get_company_by_slug, "Failed to fetch company", "Company not found", slug)


@api_bp.post("/companies")
@login_required
def create_company():
    return _create(InsertCompanySchema, storage.create_company, "Failed to create company")


# ---- Programming languages
@api_bp.get("/languages")
def list_languages():
    return _listing(storage.get_programming_languages, "Failed to fetch languages")


@api_bp.get("/languages/<slug>")
def get_language(slug):
    return _detail(storage.get_programming_language_by_slug, "Failed to fetch language", "Language not found", slug)


@api_bp.post("/languages")
@login_required
def create_language():
    return _create(InsertProgrammingLanguageSchema, storage.create_programming_language, "Failed to create language")


# ---- Topics
@api_bp.get("/topics")
def list_topics():
    return _listing(storage.get_topics, "Failed to fetch topics")


@api_bp.post("/topics")
@login_required
def create_topic():
    return _create(InsertTopicSchema, storage.create_topic, "Failed to create topic")


# ---- Questions
@api_bp.get("/questions")
def list_questions():
    filters = {
        "company_id": request.args.get("companyId"),
        "topic_id": request.args.get("topicId"),
        "difficulty": request.args.get("difficulty"),
    }
    return _listing(storage.get_questions, "Failed to fetch questions", filters)


@api_bp.get("/questions/<slug>")
def get_question(slug):
    return _detail(storage.get_question_by_slug, "Failed to fetch question", "Question not found", slug)


@api_bp.post("/questions")
@login_required
def create_question():
    return _create(InsertQuestionSchema, storage.create_question, "Failed to create question")


# ---- Solutions
@api_bp.get("/questions/<question_id>/solutions")
def list_solutions(question_id):
    return _listing(storage.get_solutions_by_question, "Failed to fetch solutions", question_id)


@api_bp.get("/questions/<question_id>/solutions/<language_id>")
def get_solution(question_id, language_id):
    return _detail(
        storage.get_solution_by_question_and_language,
        "Failed to fetch solution",
        "Solution not found",
        question_id,
        language_id,
    )


@api_bp.post("/questions/<question_id>/solutions")
@login_required
def create_solution(question_id):
    return _create(InsertSolutionSchema, storage.create_solution, "Failed to create solution", questionId=question_id)


# ---- User progress
@api_bp.get("/user/progress")
@login_required
def list_user_progress():
    return _listing(storage.get_user_progress_by_user, "Failed to fetch user progress", current_user.id)


@api_bp.get("/user/progress/<question_id>")
@login_required
def get_user_progress(question_id):
    try:
        progress = storage.get_user_progress(current_user.id, question_id)
    except SQLAlchemyError:
        return _storage_failure("Failed to fetch user progress")
    return jsonify(progress.to_dict() if progress else None)


@api_bp.put("/user/progress/<question_id>")
@login_required
def update_user_progress(question_id):
    message = "Failed to update user progress"
    data, error = _validated(InsertUserProgressSchema, message, userId=current_user.id, questionId=question_id)
    if error:
        return error
    try:
        progress = storage.upsert_user_progress(data)
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("%s: integrity violation", message, exc_info=True)
        return {"message": message}, 400
    except SQLAlchemyError:
        return _storage_failure(message)
    return progress.to_dict()


# ---- Language tutorials
@api_bp.get("/languages/<language_id>/tutorials")
def list_tutorials(language_id):
    return _listing(storage.get_tutorials_by_language, "Failed to fetch tutorials", language_id)


@api_bp.get("/languages/<language_slug>/tutorials/<tutorial_slug>")
def get_tutorial(language_slug, tutorial_slug):
    return _detail(
        storage.get_tutorial_by_slug,
        "Failed to fetch tutorial",
        "Tutorial not found",
        language_slug,
        tutorial_slug,
    )


@api_bp.post("/languages/<language_id>/tutorials")
@login_required
def create_tutorial(language_id):
    return _create(
        InsertLanguageTutorialSchema, storage.create_language_tutorial, "Failed to create tutorial", languageId=language_id
    )


# ---- Code runs
@api_bp.post("/run")
@login_required
def run_code():
    try:
        body = RunCodeRequest.model_validate(request.get_json(silent=True))
    except ValidationError:
        return {"message": "Code and language are required"}, 400

    test_cases = None
    if body.question_id:
        try:
            question = storage.get_question(body.question_id)
        except SQLAlchemyError:
            return _storage_failure("Failed to run code")
        if question is None:
            return {"message": "Question not found"}, 404
        test_cases = question.test_cases

    runner = current_app.extensions["code_runner"]
    return runner.run(body.code, body.language, stdin=body.stdin, test_cases=test_cases)


@api_bp.post("/questions/<question_id>/submit")
@login_required
def submit_solution(question_id):
    message = "Failed to submit solution"
    try:
        body = SubmitCodeRequest.model_validate(request.get_json(silent=True))
    except ValidationError:
        return {"message": "Code and language are required"}, 400

    try:
        question = storage.get_question(question_id)
        if question is None:
            return {"message": "Question not found"}, 404
        result = current_app.extensions["code_runner"].run(body.code, body.language, test_cases=question.test_cases)
        passed, total_ms = summarize(result)

        previous = storage.get_user_progress(current_user.id, question_id)
        best_time = previous.best_time if previous else None
        if passed and (best_time is None or total_ms < best_time):
            best_time = total_ms
        progress = storage.upsert_user_progress(
            {
                "user_id": current_user.id,
                "question_id": question_id,
                "solved": bool(previous and previous.solved) or passed,
                "attempts": ((previous.attempts or 0) if previous else 0) + 1,
                "last_attempt_at": utcnow(),
                "best_time": best_time,
            }
        )
    except SQLAlchemyError:
        return _storage_failure(message)
    return {"result": result, "progress": progress.to_dict()}
