from flask import Blueprint, current_app, request
from flask_login import login_required
from pydantic import ValidationError

from ..schemas import ExplainCodeRequest, GenerateHintsRequest, VisualizeAlgorithmRequest
from .service import (
    AIServiceError,
    explain_code,
    generate_algorithm_visualization,
    generate_problem_hints,
)

ai_bp = Blueprint("ai", __name__, url_prefix="/api/ai")


@ai_bp.post("/explain-code")
@login_required
def explain():
    try:
        body = ExplainCodeRequest.model_validate(request.get_json(silent=True))
    except ValidationError:
        return {"message": "Code and language are required"}, 400
    try:
        return explain_code(body.code, body.language)
    except AIServiceError:
        current_app.logger.exception("Error explaining code")
        return {"message": "Failed to explain code"}, 500


@ai_bp.post("/visualize-algorithm")
@login_required
def visualize():
    try:
        body = VisualizeAlgorithmRequest.model_validate(request.get_json(silent=True))
    except ValidationError:
        return {"message": "Algorithm and problem description are required"}, 400
    try:
        return generate_algorithm_visualization(body.algorithm, body.problem_description)
    except AIServiceError:
        current_app.logger.exception("Error generating visualization")
        return {"message": "Failed to generate visualization"}, 500


@ai_bp.post("/generate-hints")
@login_required
def hints():
    try:
        body = GenerateHintsRequest.model_validate(request.get_json(silent=True))
    except ValidationError:
        return {"message": "Problem title, description, and difficulty are required"}, 400
    try:
        return {"hints": generate_problem_hints(body.problem_title, body.problem_description, body.difficulty)}
    except AIServiceError:
        current_app.logger.exception("Error generating hints")
        return {"message": "Failed to generate hints"}, 500
