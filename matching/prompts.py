LANGUAGE_INSTRUCTIONS = {
    "en": "Respond in English. ",
    "es": (
        "Respond in Spanish (Argentina). Use Argentine Spanish expressions, vocabulary, "
        'and the "vos" form where appropriate. '
    ),
}

# -------------------------------------------------------------------
# Key Evaluation Criteria extraction
# -------------------------------------------------------------------
KEC_SYSTEM_PROMPT = {
    "en": (
        "You are a world-class executive talent advisor who creates premium candidate "
        "evaluation frameworks. You transform raw job requirements into sophisticated, "
        "client-ready insights. Your language is authoritative, nuanced and suited to "
        "C-suite executives."
    ),
    "es": (
        "Sos un asesor de talento ejecutivo de clase mundial que crea marcos de evaluación "
        "de candidatos. Transformás los requisitos de trabajo en bruto en insights "
        "sofisticados y listos para el cliente. Usá expresiones y vocabulario argentino."
    ),
}

KEC_TEMPLATE = """{language}Analyze the inputs below and return ONLY a single JSON object with keys:
executiveSummary, kecDescription, kecItems, insightFlags.

JOB DESCRIPTION: {job_description}
CLIENT REQUIREMENTS: {client_requirements}
MEETING NOTES: {meeting_notes}
RECRUITER NOTES: {recruiter_notes}
ADDITIONAL CONTEXT: {additional_notes}

Instructions:
1. executiveSummary: a flowing 150-200 word paragraph. Open with the most critical
   business need this role addresses, then its strategic impact.
2. kecDescription: 3-4 sentences on why these criteria are business levers. Include one
   SMART KPI example drawn from the materials.
3. kecItems: exactly {kec_count} objects, each with
   - "name": concise executive-friendly name (unique)
   - "icon": a single emoji
   - "description": 1-2 sentences using phrases from the inputs
   - "requirementLevel": integer 0-100, the minimum acceptable score (avoid multiples of 5)
   - "weight": integer percentage; the weights of all items must sum to 100
   - "requirementJustification": why this exact level ties to business outcomes
   - "assessmentQuestions": 2-3 objects with "question", "rationale", "idealAnswer"
4. insightFlags: exactly 2 objects {{"title", "emoji", "description", "type"}},
   one with "type": "coreNeed" and one with "type": "insight".

Return nothing else, just the JSON."""

# -------------------------------------------------------------------
# Candidate evaluation
# -------------------------------------------------------------------
EVAL_SYSTEM_PROMPT = {
    "en": (
        "You are an expert HR evaluator who objectively assesses candidates against job "
        "requirements. You provide evidence-based evaluations that cite specific candidate "
        "qualifications and experience."
    ),
    "es": (
        "Sos un evaluador de RR.HH. experto que evalúa objetivamente a los candidatos contra "
        "los requisitos del puesto. Proporcionás evaluaciones basadas en evidencia. "
        "Usá expresiones y vocabulario argentino."
    ),
}

EVAL_TEMPLATE = """{language}Return ONLY a single JSON object with keys:
candidateName, overallAssessment, profileFields, evaluationScores.

CANDIDATE NAME: {candidate_name}

CANDIDATE INFORMATION:
{candidate_info}

PROFILE FIELDS TO EXTRACT:
Stats fields: {stats_fields}
Text fields: {text_fields}

EVALUATION PARAMETERS:
{parameters}

Instructions:
1. candidateName: "{candidate_name}"
2. overallAssessment: 150-200 word paragraph on the candidate's overall fit.
3. profileFields: an object with one key per profile field listed above, each a short
   value extracted from the candidate information ("Not specified" if absent).
4. evaluationScores: exactly {parameter_count} objects, each with
   - "parameterName": the exact parameter name as listed
   - "score": integer 0-100
   - "justification": 1-2 sentences explaining the score
   - "strengths": 2 strings
   - "limitations": 2 strings
   - "assessment": array of {{"question", "answer", "evidence"}} for the parameter's questions

Return nothing else, only the JSON."""

PARAMETER_LINE = "- {name} (Min Requirement: {requirement}%)\n  Description: {description}"

# -------------------------------------------------------------------
# Key insights & decision factors
# -------------------------------------------------------------------
INSIGHTS_SYSTEM_PROMPT = {
    "en": "You are an expert talent advisor who creates strategic candidate insights for executive decision-making.",
    "es": (
        "Sos un asesor de talento experto que crea insights estratégicos de candidatos para "
        "la toma de decisiones ejecutivas. Usá expresiones y vocabulario argentino."
    ),
}

INSIGHTS_TEMPLATE = """{language}Analyze these candidate evaluations and return ONLY JSON with keys
keyInsights and decisionFactors.

EVALUATION PARAMETERS: {parameters}

CANDIDATES:
{candidates}

Instructions:
1. keyInsights: object with topPerformer, technicalEdge, fastestOnboarding, each with
   "title" (creative category name), "candidate" (exact candidate name) and
   "description" (1-2 sentences on why they excel).
2. decisionFactors: array of 2-3 strategic decision insights comparing the candidates.

Return nothing else, just the JSON."""

CANDIDATE_BLOCK = "{name}: {assessment}\nScores: {scores}"

# -------------------------------------------------------------------
# Report executive summary
# -------------------------------------------------------------------
SUMMARY_SYSTEM_PROMPT = {
    "en": (
        "You are an expert HR consultant who produces clear, concise executive summaries "
        "for candidate assessment reports, highlighting specific qualifications and differentiators."
    ),
    "es": (
        "Sos un consultor de RR.HH. experto que produce resúmenes ejecutivos claros y concisos "
        "para informes de evaluación de candidatos. Usá expresiones y vocabulario argentino."
    ),
}

SUMMARY_TEMPLATE = """{language}Generate an executive summary for a candidate assessment report for {client_name}.
They are hiring for a {role_title} position. {candidate_count} candidates were assessed.

CANDIDATE EVALUATIONS:
{candidates}
{insights}
The summary should:
1. Be professional and concise (about 150-200 words)
2. Highlight key differentiators between candidates
3. Be objective and evidence-based, referencing specific qualifications
4. Avoid recommending which candidate to hire

Respond with a single plain-text paragraph, no formatting."""

SUMMARY_CANDIDATE_BLOCK = """Candidate: {name}
Overall Assessment: {assessment}
Top Strengths: {top}
Development Areas: {bottom}"""
