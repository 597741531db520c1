import json
import logging
import re
from typing import Any, Dict, List

from openai import OpenAI, OpenAIError, RateLimitError

from quiz_studio.config import (
    GROQ_API_KEY_ENV_VAR,
    get_ai_api_key,
    get_ai_base_url,
    get_ai_model,
)
from quiz_studio.errors import RateLimited, UpstreamFailure

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 60
TEMPERATURE = 0.7
MAX_TOKENS = 4096


def build_prompt(theme: str, count: int) -> str:
    return (
        "You are an expert author of educational quizzes. Generate exactly "
        f'{count} multiple-choice questions on the following theme: "{theme}".\n\n'
        "For each question:\n"
        "- Write a clear and precise question\n"
        "- Offer exactly 4 possible answers\n"
        "- Exactly one answer must be correct\n"
        "- Wrong answers must be plausible but clearly incorrect\n\n"
        "IMPORTANT: reply ONLY with valid JSON, with no text before or after. "
        "The format must be exactly:\n\n"
        "{\n"
        '  "questions": [\n'
        "    {\n"
        '      "text": "The question here?",\n'
        '      "answers": [\n'
        '        { "text": "Answer A", "isCorrect": false },\n'
        '        { "text": "Answer B", "isCorrect": true },\n'
        '        { "text": "Answer C", "isCorrect": false },\n'
        '        { "text": "Answer D", "isCorrect": false }\n'
        "      ]\n"
        "    }\n"
        "  ]\n"
        "}\n\n"
        f'Now generate {count} questions about "{theme}":'
    )


def _strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _extract_json(payload: str) -> Dict[str, Any]:
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", payload, re.DOTALL)
        if not match:
            raise ValueError("model response was not valid JSON")
        return json.loads(match.group(0))


# Validate model output into question dicts; a question with no answer marked
# correct gets its first answer marked correct.
def parse_generated_questions(text: str) -> List[Dict[str, Any]]:
    cleaned = _strip_code_fences(text)
    try:
        parsed = _extract_json(cleaned)
        raw_questions = parsed.get("questions") if isinstance(parsed, dict) else None
        if not isinstance(raw_questions, list):
            raise ValueError("response has no questions array")

        questions = []
        for raw in raw_questions:
            if not isinstance(raw, dict):
                raise ValueError("question is not an object")
            question_text = raw.get("text")
            raw_answers = raw.get("answers")
            if not question_text or not isinstance(raw_answers, list):
                raise ValueError("question is missing text or answers")
            answers = []
            for raw_answer in raw_answers:
                if not isinstance(raw_answer, dict) or not raw_answer.get("text"):
                    raise ValueError("answer is missing text")
                answers.append(
                    {
                        "text": str(raw_answer["text"]),
                        "is_correct": bool(raw_answer.get("isCorrect")),
                    }
                )
            if answers and not any(answer["is_correct"] for answer in answers):
                logger.warning(
                    "Generated question has no correct answer, marking the first one"
                )
                answers[0]["is_correct"] = True
            questions.append({"text": str(question_text), "answers": answers})
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError too.
        logger.error("Unable to parse generated questions: %s", exc)
        raise UpstreamFailure(
            "unable to parse the AI response, please try again"
        ) from exc
    return questions


def _retry_after(exc: RateLimitError) -> int:
    raw = exc.response.headers.get("retry-after") if exc.response is not None else None
    try:
        return int(raw) if raw is not None else DEFAULT_RETRY_AFTER
    except ValueError:
        return DEFAULT_RETRY_AFTER


# Ask the Groq chat completions API (OpenAI-compatible) for questions.
# Single attempt: the SDK's own retries are disabled so 429s reach the caller.
def generate_questions(theme: str, count: int) -> List[Dict[str, Any]]:
    api_key = get_ai_api_key()
    if not api_key:
        raise UpstreamFailure(
            f"the AI API key is not configured, set {GROQ_API_KEY_ENV_VAR}"
        )

    client = OpenAI(api_key=api_key, base_url=get_ai_base_url(), max_retries=0)
    try:
        response = client.chat.completions.create(
            model=get_ai_model(),
            messages=[{"role": "user", "content": build_prompt(theme, count)}],
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
    except RateLimitError as exc:
        retry_after = _retry_after(exc)
        logger.warning("AI provider rate limited the request, retry in %ss", retry_after)
        raise RateLimited(retry_after)
    except OpenAIError:
        logger.exception("AI question generation request failed")
        raise UpstreamFailure("error while communicating with the AI provider")

    try:
        output_text = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError):
        output_text = None
    if not output_text:
        raise UpstreamFailure("invalid response from the AI provider")

    return parse_generated_questions(output_text)
