import re
import json
import logging
from typing import List, Optional

import requests
from pydantic import ValidationError

import config
from schemas import (
    CandidateEvaluation,
    EvaluationParameter,
    KecExtraction,
    KeyInsightsResult,
    ProfileFieldsSelection,
)
from .prompts import (
    LANGUAGE_INSTRUCTIONS,
    KEC_SYSTEM_PROMPT, KEC_TEMPLATE,
    EVAL_SYSTEM_PROMPT, EVAL_TEMPLATE, PARAMETER_LINE,
    INSIGHTS_SYSTEM_PROMPT, INSIGHTS_TEMPLATE, CANDIDATE_BLOCK,
    SUMMARY_SYSTEM_PROMPT, SUMMARY_TEMPLATE, SUMMARY_CANDIDATE_BLOCK,
)

logger = logging.getLogger(__name__)

KEC_COUNT = 5
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMError(RuntimeError):
    """The chat completion request could not be made or failed."""


class LLMResponseError(LLMError):
    """The model answered, but not with the JSON we asked for."""


def _chat(system_prompt: str, user_prompt: str, temperature: float, json_mode: bool = True) -> str:
    if not config.OPENAI_API_KEY:
        raise LLMError("OpenAI API key not found. Set OPENAI_API_KEY in the environment.")

    headers = {
        "Authorization": f"Bearer {config.OPENAI_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": config.MODEL_NAME,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    try:
        response = requests.post(config.LLM_API_URL, headers=headers, json=payload, timeout=config.LLM_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"LLM request failed: {e}")
        raise LLMError(f"LLM request failed: {e}") from e

    if not response.ok:
        try:
            detail = response.json().get("error", {}).get("message", "Unknown error")
        except ValueError:
            detail = response.text or "Unknown error"
        logger.error(f"LLM API error {response.status_code}: {detail}")
        raise LLMError(f"LLM API error: {detail}")

    try:
        data = response.json()
    except ValueError as e:
        logger.error(f"LLM API returned a non-JSON body: {e}")
        raise LLMResponseError("LLM API returned a response that is not JSON") from e
    if not isinstance(data, dict):
        raise LLMResponseError("LLM API response is not a JSON object")

    choices = data.get("choices") or [{}]
    content = (choices[0].get("message") or {}).get("content") or ""
    usage = data.get("usage", {})
    logger.info(f"LLM call ok ({config.MODEL_NAME}, {usage.get('total_tokens', '?')} tokens)")
    return content


def extract_json(content: str) -> dict:
    """Pull the first {...} block out of a model reply and parse it."""
    match = _JSON_OBJECT.search(content or "")
    if not match:
        raise LLMResponseError("Could not extract valid JSON from the AI response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"AI response is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMResponseError("AI response JSON is not an object")
    return parsed


def _validate(model, content: str, what: str):
    try:
        return model.model_validate(extract_json(content))
    except ValidationError as e:
        logger.error(f"Invalid {what} from AI response: {e}")
        raise LLMResponseError(f"Failed to parse {what} from AI response") from e


def _language(language: Optional[str]) -> str:
    return config.resolve_language(language)


# -------------------------------------------------------------------
# Public calls
# -------------------------------------------------------------------
def extract_kec(job_description: str,
                client_requirements: str = "",
                meeting_notes: str = "",
                recruiter_notes: str = "",
                additional_notes: str = "",
                language: str = None) -> KecExtraction:
    """Executive summary, KEC items and insight flags for a job."""
    lang = _language(language)
    prompt = KEC_TEMPLATE.format(
        language=LANGUAGE_INSTRUCTIONS[lang],
        job_description=job_description,
        client_requirements=client_requirements or "",
        meeting_notes=meeting_notes or "",
        recruiter_notes=recruiter_notes or "",
        additional_notes=additional_notes or "",
        kec_count=KEC_COUNT,
    )
    content = _chat(KEC_SYSTEM_PROMPT[lang], prompt, temperature=0.2)
    result = _validate(KecExtraction, content, "assessment parameters")
    if not result.kec_items:
        raise LLMResponseError("AI response contained no evaluation parameters")
    return result


def evaluate_candidate(candidate_name: str,
                       candidate_info: str,
                       parameters: List[EvaluationParameter],
                       profile_fields: ProfileFieldsSelection = None,
                       language: str = None) -> CandidateEvaluation:
    """Score one candidate 0-100 against every parameter."""
    lang = _language(language)
    fields = profile_fields or ProfileFieldsSelection()
    parameter_lines = "\n".join(
        PARAMETER_LINE.format(name=p.name, requirement=p.requirement_level, description=p.description)
        for p in parameters
    )
    prompt = EVAL_TEMPLATE.format(
        language=LANGUAGE_INSTRUCTIONS[lang],
        candidate_name=candidate_name,
        candidate_info=candidate_info,
        stats_fields=", ".join(fields.stats),
        text_fields=", ".join(fields.text),
        parameters=parameter_lines,
        parameter_count=len(parameters),
    )
    content = _chat(EVAL_SYSTEM_PROMPT[lang], prompt, temperature=0.3)
    evaluation = _validate(CandidateEvaluation, content, "candidate evaluation")

    known = {p.name for p in parameters}
    unknown = [s.parameter_name for s in evaluation.evaluation_scores if s.parameter_name not in known]
    if unknown:
        logger.warning(f"Evaluation of {candidate_name} scored unknown parameters: {unknown}")
    if not evaluation.candidate_name:
        evaluation.candidate_name = candidate_name
    return evaluation


def generate_key_insights(evaluations: List[CandidateEvaluation],
                          parameters: List[EvaluationParameter],
                          language: str = None) -> KeyInsightsResult:
    lang = _language(language)
    blocks = []
    for ev in evaluations:
        scores = ", ".join(f"{s.parameter_name}: {s.score:g}%" for s in ev.evaluation_scores)
        blocks.append(CANDIDATE_BLOCK.format(name=ev.candidate_name, assessment=ev.overall_assessment, scores=scores))
    prompt = INSIGHTS_TEMPLATE.format(
        language=LANGUAGE_INSTRUCTIONS[lang],
        parameters=", ".join(p.name for p in parameters),
        candidates="\n\n".join(blocks),
    )
    content = _chat(INSIGHTS_SYSTEM_PROMPT[lang], prompt, temperature=0.3)
    return _validate(KeyInsightsResult, content, "key insights")


def generate_executive_summary(client_name: str,
                               role_title: str,
                               evaluations: List[CandidateEvaluation],
                               insights: Optional[KeyInsightsResult] = None,
                               language: str = None) -> str:
    """Plain-text summary paragraph for the final report."""
    lang = _language(language)
    blocks = []
    for ev in evaluations:
        ranked = sorted(ev.evaluation_scores, key=lambda s: s.score, reverse=True)
        top = ", ".join(f"{s.parameter_name} ({s.score:g}%)" for s in ranked[:2])
        bottom = ", ".join(f"{s.parameter_name} ({s.score:g}%)" for s in list(reversed(ranked))[:2])
        blocks.append(SUMMARY_CANDIDATE_BLOCK.format(
            name=ev.candidate_name, assessment=ev.overall_assessment, top=top, bottom=bottom,
        ))

    insights_text = ""
    if insights is not None:
        lines = []
        ki = insights.key_insights
        for label, item in (("Top Performer", ki.top_performer),
                            ("Technical Edge", ki.technical_edge),
                            ("Fastest Onboarding", ki.fastest_onboarding)):
            if item is not None:
                lines.append(f"- {label}: {item.candidate} {item.description}")
        if lines:
            insights_text = "\nKEY INSIGHTS TO EMPHASIZE:\n" + "\n".join(lines) + "\n"

    prompt = SUMMARY_TEMPLATE.format(
        language=LANGUAGE_INSTRUCTIONS[lang],
        client_name=client_name or "the client",
        role_title=role_title or "the open",
        candidate_count=len(evaluations),
        candidates="\n\n".join(blocks),
        insights=insights_text,
    )
    content = _chat(SUMMARY_SYSTEM_PROMPT[lang], prompt, temperature=0.3, json_mode=False)
    return content.strip()
