
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
AI task operations with deterministic fallbacks.

Every operation follows the same steps: check inputs, build the prompt,
call the provider, recover text/JSON, validate, and fall back to the
local transformation when any of that fails. Operations without a
sensible fallback raise ProcessingError instead.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from cv_builder import fallbacks, prompts
from cv_builder.errors import (
    RECOVERABLE_ERRORS,
    ExtractionError,
    ProcessingError,
    SchemaError,
    ValidationError,
)
from cv_builder.models import (
    AIConfig,
    InternshipAnalysis,
    InternshipContext,
    InternshipEmails,
    InternshipSubject,
    TaskResult,
)
from cv_builder.providers import ProviderAdapter
from cv_builder.schema import (
    CVDocument,
    ExperienceEntry,
    parse_structured_cv,
    repair_personal,
    restore_ids,
    sanitize_nulls,
    validate,
)
from cv_builder.text_utils import extract_json_object, extract_keywords, merge_skills, parse_keyword_list, split_bullets

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 20
MAX_HIGHLIGHTS = 5
MIN_LETTER_LENGTH = 100
LANGUAGES = ("en", "fr")

FALLBACK_MESSAGE = "AI output was unavailable, a local rewrite was applied instead."


def _parse_json(text: str) -> dict:
    """Recover and decode the JSON object embedded in an LLM answer."""
    if not text:
        raise ExtractionError("Empty response from AI")
    try:
        data = json.loads(extract_json_object(text))
    except json.JSONDecodeError as e:
        raise ExtractionError(f"AI response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError("AI response is not a JSON object")
    return data


class CVAssistant:
    """
    The AI-backed CV operations. Holds the provider adapter; stateless
    otherwise, so one instance serves every request.
    """
    def __init__(self, adapter: ProviderAdapter, max_workers: int = 4):
        self.adapter = adapter
        self.max_workers = max(1, max_workers)

    def _call_llm(self, prompt: str, config: Optional[AIConfig] = None) -> str:
        return self.adapter.generate_text(prompt, config)

    # --- Summary -------------------------------------------------------

    def enhance_summary(
        self, summary: str, context: Optional[str] = None, config: Optional[AIConfig] = None
    ) -> TaskResult[str]:
        trimmed = (summary or "").strip()
        if not trimmed:
            raise ValidationError("Summary is required.")

        prompt = prompts.summary_enhancement_prompt(trimmed, (context or "").strip() or None)
        try:
            enhanced = self._call_llm(prompt, config).strip()
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Summary enhancement failed, using fallback: {e}")
            enhanced = ""

        if not enhanced:
            return TaskResult(fallbacks.fallback_summary(trimmed), fallback=True, message=FALLBACK_MESSAGE)
        return TaskResult(enhanced)

    # --- Experience ----------------------------------------------------

    def enhance_experience(
        self,
        experience: ExperienceEntry,
        job_description: Optional[str] = None,
        keywords: Optional[List[str]] = None,
        config: Optional[AIConfig] = None,
    ) -> TaskResult[ExperienceEntry]:
        """
        Rewrite one entry's highlights (at most five). Only ``highlights``
        changes; the id and every other field are kept.
        """
        job_description = (job_description or "").strip() or None
        keywords = keywords or (extract_keywords(job_description) if job_description else [])

        prompt = prompts.experience_enhancement_prompt(experience, job_description, keywords)
        try:
            suggestions = split_bullets(self._call_llm(prompt, config), limit=MAX_HIGHLIGHTS)
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Experience enhancement failed for {experience.id or experience.role!r}: {e}")
            suggestions = []

        if not suggestions:
            return TaskResult(
                fallbacks.fallback_experience(experience, keywords),
                fallback=True,
                message=FALLBACK_MESSAGE,
            )
        enhanced = ExperienceEntry.model_validate({**experience.model_dump(), "highlights": suggestions})
        return TaskResult(enhanced)

    # --- Adapt to job --------------------------------------------------

    def suggest_keywords(self, job_description: str, config: Optional[AIConfig] = None) -> TaskResult[List[str]]:
        """AI keyword list, or the local tokenizer when the AI has nothing usable."""
        try:
            keywords = parse_keyword_list(self._call_llm(prompts.keyword_extraction_prompt(job_description), config), MAX_KEYWORDS)
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Keyword extraction failed, using local tokenizer: {e}")
            keywords = []
        if keywords:
            return TaskResult(keywords)
        return TaskResult(extract_keywords(job_description, MAX_KEYWORDS), fallback=True)

    def adapt_cv(self, cv: CVDocument, job_description: str, config: Optional[AIConfig] = None) -> TaskResult[CVDocument]:
        """
        Tailor the whole CV to a job post. Experience entries are enhanced
        concurrently; each entry falls back on its own.
        """
        job_description = (job_description or "").strip()
        if not job_description:
            raise ValidationError("CV data and job description are required.")

        keywords = self.suggest_keywords(job_description, config)
        used_fallback = keywords.fallback

        summary = cv.personal.summary
        if summary:
            try:
                adapted = self._call_llm(prompts.summary_adaptation_prompt(summary, keywords.value), config).strip()
            except RECOVERABLE_ERRORS as e:
                logger.warning(f"Summary adaptation failed: {e}")
                adapted = ""
            if adapted:
                summary = adapted
            else:
                used_fallback = True

        experience = []
        if cv.experience:
            workers = min(self.max_workers, len(cv.experience))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="adapt-cv") as pool:
                futures = [
                    pool.submit(self.enhance_experience, entry, job_description, keywords.value, config)
                    for entry in cv.experience
                ]
                results = [f.result() for f in futures]
            experience = [r.value for r in results]
            used_fallback = used_fallback or any(r.fallback for r in results)

        if keywords.fallback:
            skills = fallbacks.fallback_adapt_skills(cv.skills, keywords.value)
        else:
            skills = merge_skills(cv.skills, keywords.value)

        try:
            adapted_cv = validate(cv.model_copy(update={
                "personal": cv.personal.model_copy(update={"summary": summary}),
                "experience": experience,
                "skills": skills,
            }))
        except SchemaError as e:
            logger.warning(f"Adapted CV failed validation, using fallback: {e}")
            return TaskResult(
                fallbacks.fallback_adapt_cv(cv, job_description, keywords.value),
                fallback=True,
                message=FALLBACK_MESSAGE,
            )
        return TaskResult(adapted_cv, fallback=used_fallback, message=FALLBACK_MESSAGE if used_fallback else "")

    # --- Import --------------------------------------------------------

    def import_cv(self, text: str, config: Optional[AIConfig] = None) -> TaskResult[CVDocument]:
        """
        Structure pasted resume text. JSON already matching the schema is
        taken as-is; anything else needs the AI. There is no heuristic
        fallback: failures raise ProcessingError.
        """
        trimmed = (text or "").strip()
        if not trimmed:
            raise ValidationError("Resume text is required for AI import.")

        direct = parse_structured_cv(trimmed)
        if direct is not None:
            return TaskResult(direct, message="Structured CV data imported directly.")

        logger.info(f"Importing resume with AI ({len(trimmed)} chars)")
        try:
            response = self._call_llm(prompts.cv_import_prompt(trimmed), config)
            raw = sanitize_nulls(_parse_json(response))
            cv = validate(repair_personal(raw))
        except RECOVERABLE_ERRORS as e:
            logger.error(f"AI import failed: {e}")
            raise ProcessingError("AI could not structure that resume yet.") from e

        logger.info(f"Imported CV with {len(cv.experience)} experience entries")
        return TaskResult(cv)

    # --- ATS -----------------------------------------------------------

    def optimize_ats(self, cv: CVDocument, config: Optional[AIConfig] = None) -> TaskResult[CVDocument]:
        try:
            response = self._call_llm(prompts.ats_optimization_prompt(cv), config)
            raw = sanitize_nulls(_parse_json(response))
            optimized = validate(restore_ids(repair_personal(raw, fallback=cv), cv))
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"ATS optimization failed, using fallback: {e}")
            return TaskResult(fallbacks.fallback_optimize_ats(cv), fallback=True, message=FALLBACK_MESSAGE)
        return TaskResult(optimized)

    # --- Motivation letter ---------------------------------------------

    def generate_motivation_letter(
        self, cv: CVDocument, job_position: str, language: str = "en", config: Optional[AIConfig] = None
    ) -> TaskResult[str]:
        if not (job_position or "").strip():
            raise ValidationError("Job position is required to generate motivation letter.")
        if language not in LANGUAGES:
            raise ValidationError(f"Unsupported letter language: {language}")

        try:
            letter = self._call_llm(prompts.motivation_letter_prompt(cv, job_position, language), config).strip()
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Motivation letter generation failed: {e}")
            letter = ""

        if len(letter) < MIN_LETTER_LENGTH:
            return TaskResult(fallbacks.fallback_letter(cv, job_position, language), fallback=True, message=FALLBACK_MESSAGE)
        return TaskResult(letter)

    # --- Internship ----------------------------------------------------

    def suggest_internship_subjects(
        self, internship_text: str, cv: CVDocument, config: Optional[AIConfig] = None
    ) -> TaskResult[InternshipAnalysis]:
        """AI-only: no fallback, failures raise ProcessingError."""
        if not (internship_text or "").strip():
            raise ValidationError("CV data and internship text are required.")

        try:
            data = _parse_json(self._call_llm(prompts.internship_subjects_prompt(internship_text, cv), config))
            subjects = data.get("subjects")
            if not isinstance(subjects, list) or not subjects:
                raise ExtractionError("AI response has no subjects")
            parsed = []
            for item in subjects:
                if not isinstance(item, dict):
                    raise ExtractionError("Invalid subject structure from AI")
                subject = item.get("subject")
                explanation = item.get("explanation")
                if not isinstance(subject, str) or not subject.strip() or not isinstance(explanation, str) or not explanation.strip():
                    raise ExtractionError("Invalid subject structure from AI")
                parsed.append(InternshipSubject(subject.strip(), explanation.strip()))
        except RECOVERABLE_ERRORS as e:
            logger.error(f"Internship analysis failed: {e}")
            raise ProcessingError(f"Failed to analyze internship: {e.message}") from e

        def optional_text(key: str) -> Optional[str]:
            value = data.get(key)
            if not isinstance(value, str) or not value.strip() or value.strip().lower() == "null":
                return None
            return value.strip()

        context = InternshipContext(
            internship_text=internship_text,
            company_email=optional_text("companyEmail"),
            company_name=optional_text("companyName"),
        )
        return TaskResult(InternshipAnalysis(subjects=parsed, context=context))

    def generate_internship_emails(
        self,
        context: InternshipContext,
        cv: CVDocument,
        selected_subject: str,
        config: Optional[AIConfig] = None,
    ) -> TaskResult[InternshipEmails]:
        """AI-only: no fallback, failures raise ProcessingError."""
        if not (selected_subject or "").strip():
            raise ValidationError("CV data, internship text, and selected subject are required.")

        prompt = prompts.internship_emails_prompt(context.internship_text, cv, selected_subject.strip())
        try:
            data = _parse_json(self._call_llm(prompt, config))
            applicant = data.get("applicantEmail")
            company = data.get("companyEmail")
            if not isinstance(applicant, str) or not applicant.strip() or not isinstance(company, str) or not company.strip():
                raise ExtractionError("Invalid response structure from AI")
        except RECOVERABLE_ERRORS as e:
            logger.error(f"Internship email generation failed: {e}")
            raise ProcessingError(f"Failed to generate emails: {e.message}") from e

        return TaskResult(InternshipEmails(
            applicant_email=applicant.strip(),
            company_email=company.strip(),
            recipient=context.company_email,
        ))
