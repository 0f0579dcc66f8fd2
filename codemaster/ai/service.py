"""Code explanations, algorithm walkthroughs and hints from a hosted chat model.

Each operation is one chat-completion call with a fixed prompt asking for a
JSON object. Missing or malformed fields in the reply are replaced with
fallbacks so callers always receive the full shape; any failure of the call
itself is raised as AIServiceError.
"""
import json
import logging

from flask import current_app
from openai import OpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
NOT_SPECIFIED = "Not specified"

EXPLAIN_CODE_PROMPT = (
    "You are an expert programming tutor. Analyze the provided {language} code and provide a "
    "comprehensive explanation. Respond with JSON in this format: "
    '{{ "overview": "string", "stepByStep": ["string"], "timeComplexity": "string", '
    '"spaceComplexity": "string", "keyConcepts": ["string"] }}'
)

VISUALIZE_PROMPT = (
    "You are an expert algorithm visualizer. Create a step-by-step visualization for the given "
    "algorithm and problem. Respond with JSON in this format: "
    '{ "title": "string", "description": "string", "steps": [{"step": number, "description": '
    '"string", "code": "string", "visualization": "string"}], "complexity": {"time": "string", '
    '"space": "string"} }'
)

HINTS_PROMPT = (
    "You are a helpful coding interview mentor. Generate progressive hints for the given problem. "
    "Start with high-level approaches and gradually provide more specific guidance. "
    'Respond with JSON in this format: { "hints": ["string"] }'
)


class AIServiceError(Exception):
    pass


def _client():
    client = current_app.extensions.get("openai_client")
    if client is None:
        client = OpenAI(api_key=current_app.config.get("OPENAI_API_KEY"))
        current_app.extensions["openai_client"] = client
    return client


def _complete_json(system_prompt, user_prompt):
    response = _client().chat.completions.create(
        model=current_app.config.get("OPENAI_MODEL", DEFAULT_MODEL),
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        response_format={"type": "json_object"},
    )
    result = json.loads(response.choices[0].message.content or "{}")
    if not isinstance(result, dict):
        logger.warning("Model returned %s instead of a JSON object", type(result).__name__)
        return {}
    return result


def _text(value, fallback):
    return value if isinstance(value, str) and value else fallback


def _strings(value):
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def explain_code(code, language):
    try:
        result = _complete_json(
            EXPLAIN_CODE_PROMPT.format(language=language),
            f"Explain this {language} code step by step:\n\n{code}",
        )
    except Exception as e:
        raise AIServiceError(f"Failed to explain code: {e}") from e

    return {
        "overview": _text(result.get("overview"), "Unable to generate overview"),
        "stepByStep": _strings(result.get("stepByStep")),
        "timeComplexity": _text(result.get("timeComplexity"), NOT_SPECIFIED),
        "spaceComplexity": _text(result.get("spaceComplexity"), NOT_SPECIFIED),
        "keyConcepts": _strings(result.get("keyConcepts")),
    }


def _visualization_steps(steps):
    if not isinstance(steps, list):
        return []
    normalized = []
    for index, step in enumerate(s for s in steps if isinstance(s, dict)):
        normalized.append(
            {
                "step": step["step"] if isinstance(step.get("step"), int) else index + 1,
                "description": _text(step.get("description"), ""),
                "code": _text(step.get("code"), ""),
                "visualization": _text(step.get("visualization"), ""),
            }
        )
    return normalized


def generate_algorithm_visualization(algorithm, problem_description):
    try:
        result = _complete_json(
            VISUALIZE_PROMPT,
            f"Create a visual explanation for the {algorithm} algorithm to solve: {problem_description}. "
            "Include step-by-step code execution and describe how the data structures change at each step.",
        )
    except Exception as e:
        raise AIServiceError(f"Failed to generate algorithm visualization: {e}") from e

    complexity = result.get("complexity")
    if not isinstance(complexity, dict):
        complexity = {}
    return {
        "title": _text(result.get("title"), algorithm),
        "description": _text(result.get("description"), "Algorithm visualization"),
        "steps": _visualization_steps(result.get("steps")),
        "complexity": {
            "time": _text(complexity.get("time"), NOT_SPECIFIED),
            "space": _text(complexity.get("space"), NOT_SPECIFIED),
        },
    }


def generate_problem_hints(problem_title, problem_description, difficulty):
    try:
        result = _complete_json(
            HINTS_PROMPT,
            f"Generate 3-5 progressive hints for this {difficulty} difficulty problem:\n\n"
            f"Title: {problem_title}\n\nDescription: {problem_description}",
        )
    except Exception as e:
        raise AIServiceError(f"Failed to generate hints: {e}") from e
    return _strings(result.get("hints"))
