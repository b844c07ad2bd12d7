
# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Deterministic, network-free stand-ins for every AI task that has one.

Each function is pure: the same inputs always give the same output, with
cycling by index in place of randomness.
"""

from typing import List, Optional

from cv_builder.schema import CVDocument, ExperienceEntry, validate
from cv_builder.text_utils import dedupe_casefold, extract_keywords, strip_list_marker, title_case

SUMMARY_SENTENCE = "Elevated to emphasize measurable impact and strategic collaboration."
DEFAULT_SUMMARY = "Product builder focused on translating customer insight into measurable business impact."
DEFAULT_KEYWORDS = ["strategy", "execution", "leadership"]

ACTION_VERBS = [
    "Achieved", "Implemented", "Led", "Developed", "Managed", "Increased",
    "Reduced", "Optimized", "Delivered", "Drove", "Established", "Executed",
    "Spearheaded", "Streamlined", "Enhanced", "Generated",
]

ATS_SKILLS = [
    "Project Management",
    "Cross-functional Collaboration",
    "Strategic Planning",
    "Process Improvement",
    "Data Analysis",
]
ATS_SUMMARY_SENTENCE = (
    "Results-driven professional with proven track record in delivering measurable "
    "outcomes and driving organizational success through data-driven strategies."
)
ATS_DEFAULT_HIGHLIGHT = "key initiatives to drive business growth and operational excellence"

ADAPT_SKILL_KEYWORDS = 3
ADAPT_MAX_SKILLS = 15
ATS_MAX_SKILLS = 20


def _sentence(text: str) -> str:
    return text.strip().rstrip(".")


def fallback_summary(summary: str) -> str:
    """Append a static professional sentence; never replace the summary."""
    trimmed = (summary or "").strip()
    if not trimmed:
        return DEFAULT_SUMMARY
    return f"{_sentence(trimmed)}. {SUMMARY_SENTENCE}"


def fallback_experience(entry: ExperienceEntry, keywords: Optional[List[str]] = None) -> ExperienceEntry:
    """
    Suffix each highlight with a clause citing the n-th keyword (cycling),
    or synthesise one highlight when there are none.
    """
    keywords = [k for k in (keywords or []) if k] or DEFAULT_KEYWORDS
    if entry.highlights:
        highlights = [
            f"{_sentence(line)}, demonstrating {title_case(keywords[index % len(keywords)])}."
            for index, line in enumerate(entry.highlights)
        ]
    else:
        highlights = [f"Delivered measurable outcomes aligned with {title_case(keywords[0])} priorities."]
    return ExperienceEntry.model_validate({**entry.model_dump(), "highlights": highlights})


def fallback_adapt_skills(skills: List[str], keywords: List[str]) -> List[str]:
    """Append up to three keywords as capitalised skills, capped at 15."""
    keywords = [k for k in keywords if k] or DEFAULT_KEYWORDS
    added = [title_case(keywords[i % len(keywords)]) for i in range(min(ADAPT_SKILL_KEYWORDS, len(keywords)))]
    return dedupe_casefold(list(skills) + added)[:ADAPT_MAX_SKILLS]


def fallback_adapt_cv(cv: CVDocument, job_description: str, keywords: Optional[List[str]] = None) -> CVDocument:
    """Whole-CV adaptation without AI: per-entry keyword clauses plus skills."""
    keywords = keywords or extract_keywords(job_description, 20) or DEFAULT_KEYWORDS
    experience = [fallback_experience(entry, keywords) for entry in cv.experience]
    return validate(cv.model_copy(update={
        "experience": experience,
        "skills": fallback_adapt_skills(cv.skills, keywords),
    }))


def _ats_highlights(highlights: List[str]) -> List[str]:
    if not highlights:
        return [f"{ACTION_VERBS[0]} {ATS_DEFAULT_HIGHLIGHT}"]
    return [
        f"{ACTION_VERBS[index % len(ACTION_VERBS)]} {strip_list_marker(line)}"
        for index, line in enumerate(highlights)
    ]


def fallback_ats_skills(skills: List[str]) -> List[str]:
    lowered = [s.lower() for s in skills]
    missing = [k for k in ATS_SKILLS if not any(k.lower() in s for s in lowered)]
    return dedupe_casefold(list(skills) + missing)[:ATS_MAX_SKILLS]


def fallback_optimize_ats(cv: CVDocument) -> CVDocument:
    """Action-verb prefixes on every highlight plus standard ATS skills."""
    summary = cv.personal.summary
    summary = f"{_sentence(summary)}. {ATS_SUMMARY_SENTENCE}" if summary else ATS_SUMMARY_SENTENCE
    experience = [
        entry.model_copy(update={"highlights": _ats_highlights(entry.highlights)})
        for entry in cv.experience
    ]
    return validate(cv.model_copy(update={
        "personal": cv.personal.model_copy(update={"summary": summary}),
        "experience": experience,
        "skills": fallback_ats_skills(cv.skills),
    }))


def fallback_letter(cv: CVDocument, job_position: str, language: str = "en") -> str:
    """Templated motivation letter from name, target role, latest role and top skills."""
    p = cv.personal
    target = (job_position or "").strip().split("\n")[0].strip() or "position"
    latest = cv.experience[0] if cv.experience else None
    top_skills = ", ".join(cv.skills[:3])
    first_skill = cv.skills[0] if cv.skills else ""

    if language == "fr":
        latest_clause = f" en tant que {latest.role} chez {latest.company}" if latest else ""
        skills_clause = f", j'ai développé une solide expertise en {top_skills}" if top_skills else ""
        body = [
            "Madame, Monsieur,",
            "",
            f"Je vous adresse ma candidature pour le poste suivant : {target}. "
            f"Fort(e) de mon parcours de {p.title or 'professionnel(le)'}, je souhaite mettre mon expérience au service de votre équipe.",
            "",
            f"Dans mon poste le plus récent{latest_clause}{skills_clause}. {p.summary}".strip(),
            "",
            f"Mon expérience en {first_skill or 'ce domaine'} me permettrait de contribuer rapidement à vos projets. "
            "Je serais heureux(se) d'échanger avec vous sur cette opportunité.",
            "",
            "Je vous prie d'agréer, Madame, Monsieur, l'expression de mes salutations distinguées.",
            "",
            p.full_name,
            p.email,
            p.phone,
        ]
    else:
        latest_clause = f" as {latest.role} at {latest.company}" if latest else ""
        skills_clause = f", I have developed strong expertise in {top_skills}" if top_skills else ""
        body = [
            "Dear Hiring Manager,",
            "",
            f"I am writing to express my strong interest in the {target} position. "
            f"With my background as {p.title or 'a professional'}, I am excited about the opportunity to contribute to your team.",
            "",
            f"In my most recent role{latest_clause}{skills_clause}. {p.summary}".strip(),
            "",
            f"My experience in {first_skill or 'the field'} has equipped me with the skills necessary to excel in this role "
            "and make meaningful contributions to your organization. I would welcome the opportunity to discuss how my background would benefit your team.",
            "",
            "Thank you for considering my application.",
            "",
            "Sincerely,",
            p.full_name,
            p.email,
            p.phone,
        ]
    return "\n".join(body).strip()
