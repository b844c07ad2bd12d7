
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
Session CV state and the AI actions a user triggers on it.

The workspace owns one CVDocument. AI results are applied either as a
whole-document replacement (only ever with a validated CVDocument) or as
a replacement of a single entry looked up by id. Each operation records
the revision of its target before the request goes out; if the target
was edited, replaced or cancelled while the request was in flight the
result is dropped as stale.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cv_builder import fallbacks
from cv_builder.client import AIClient
from cv_builder.errors import ExtractionError, SchemaError, ValidationError
from cv_builder.ingest import extract_text_from_file
from cv_builder.schema import (
    CVDocument,
    default_cv,
    parse_structured_cv,
    validate,
    validate_experience,
)
from cv_builder.text_utils import extract_keywords

logger = logging.getLogger(__name__)

SUMMARY_TARGET = "personal.summary"


@dataclass
class Outcome:
    """What happened to one workspace action."""
    applied: bool = False
    value: Any = None
    fallback: bool = False
    stale: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class _Token:
    target: Optional[str]
    revision: int
    replacements: int


class CVWorkspace:
    def __init__(self, client: AIClient, doc: Optional[CVDocument] = None):
        self.client = client
        self._lock = threading.RLock()
        self._doc = validate(doc) if doc is not None else default_cv()
        self._doc_revision = 0
        self._replacements = 0
        self._revisions: Dict[str, int] = {}

    @property
    def doc(self) -> CVDocument:
        with self._lock:
            return self._doc

    def to_dict(self) -> dict:
        return self.doc.to_dict()

    # --- Revisions -----------------------------------------------------

    def _token(self, target: Optional[str] = None) -> _Token:
        with self._lock:
            if target is None:
                return _Token(None, self._doc_revision, self._replacements)
            return _Token(target, self._revisions.get(target, 0), self._replacements)

    def _is_current(self, token: _Token) -> bool:
        if token.target is None:
            return token.revision == self._doc_revision
        return (
            token.replacements == self._replacements
            and token.revision == self._revisions.get(token.target, 0)
        )

    def _touch(self, target: Optional[str] = None) -> None:
        self._doc_revision += 1
        if target is not None:
            self._revisions[target] = self._revisions.get(target, 0) + 1

    def cancel(self, target: Optional[str] = None) -> None:
        """
        Drop the results of in-flight operations on ``target`` (an entry id
        or ``"personal.summary"``), or of every operation when omitted.
        """
        with self._lock:
            if target is None:
                self._doc_revision += 1
                self._replacements += 1
            else:
                self._revisions[target] = self._revisions.get(target, 0) + 1

    # --- Manual edits --------------------------------------------------

    def replace(self, candidate: Any) -> CVDocument:
        """Replace the whole document; raises SchemaError on invalid data."""
        doc = validate(candidate)
        with self._lock:
            self._doc = doc
            self._doc_revision += 1
            self._replacements += 1
        return doc

    def update_personal(self, **fields) -> None:
        with self._lock:
            data = {**self._doc.personal.model_dump(), **fields}
            doc = validate({**self._doc.model_dump(), "personal": data})
            self._doc = doc
            self._touch(SUMMARY_TARGET if "summary" in fields else None)

    def update_experience(self, entry_id: str, **fields) -> None:
        with self._lock:
            self._set_experience(entry_id, lambda entry: {**entry.model_dump(), **fields, "id": entry_id})
            self._touch(entry_id)

    def _set_experience(self, entry_id: str, change) -> None:
        if self._doc.find_experience(entry_id) is None:
            raise ValidationError(f"Unknown experience entry: {entry_id}")
        experience = [
            validate_experience(change(entry)) if entry.id == entry_id else entry
            for entry in self._doc.experience
        ]
        self._doc = self._doc.model_copy(update={"experience": experience})

    def _apply_document(self, token: _Token, doc: CVDocument, fallback: bool) -> Outcome:
        with self._lock:
            if not self._is_current(token):
                logger.info("Discarding stale CV result")
                return Outcome(stale=True, value=doc, fallback=fallback)
            self._doc = doc
            self._doc_revision += 1
            self._replacements += 1
        return Outcome(applied=True, value=doc, fallback=fallback)

    # --- AI actions ----------------------------------------------------

    def enhance_summary(self, context: Optional[str] = None) -> Outcome:
        token = self._token(SUMMARY_TARGET)
        summary = self.doc.personal.summary

        result = self.client.request_ai("enhance-summary", {"summary": summary, "context": context or ""})
        enhanced = result.data.get("summary") if isinstance(result.data, dict) else None
        used_fallback = result.fallback or not isinstance(enhanced, str) or not enhanced.strip()
        if used_fallback:
            logger.info(f"Using local summary fallback ({result.error or 'empty answer'})")
            enhanced = fallbacks.fallback_summary(summary)

        with self._lock:
            if not self._is_current(token):
                return Outcome(stale=True, value=enhanced, fallback=used_fallback)
            self._doc = self._doc.model_copy(update={
                "personal": self._doc.personal.model_copy(update={"summary": enhanced.strip()}),
            })
            self._touch(SUMMARY_TARGET)
        return Outcome(applied=True, value=enhanced, fallback=used_fallback, error=result.error)

    def enhance_experience(self, entry_id: str, job_description: Optional[str] = None) -> Outcome:
        token = self._token(entry_id)
        entry = self.doc.find_experience(entry_id)
        if entry is None:
            return Outcome(error=f"Unknown experience entry: {entry_id}")

        payload = {"experience": entry.model_dump(by_alias=True)}
        if job_description:
            payload["jobDescription"] = job_description
        result = self.client.request_ai("enhance-experience", payload)

        enhanced = None
        if not result.fallback and isinstance(result.data, dict):
            try:
                enhanced = validate_experience(result.data.get("experience"))
            except SchemaError as e:
                logger.warning(f"Enhanced experience {entry_id} is invalid: {e.message}")
        used_fallback = enhanced is None
        if used_fallback:
            keywords = extract_keywords(job_description) if job_description else None
            enhanced = fallbacks.fallback_experience(entry, keywords)

        with self._lock:
            if not self._is_current(token) or self._doc.find_experience(entry_id) is None:
                logger.info(f"Discarding stale enhancement for {entry_id}")
                return Outcome(stale=True, value=list(enhanced.highlights), fallback=used_fallback)
            highlights = list(enhanced.highlights)
            self._set_experience(entry_id, lambda current: {**current.model_dump(), "highlights": highlights})
            self._touch(entry_id)
        return Outcome(applied=True, value=highlights, fallback=used_fallback, error=result.error)

    def _document_action(self, action: str, payload: dict, fallback) -> Outcome:
        token = self._token()
        result = self.client.request_ai(action, payload)

        doc = None
        if not result.fallback and isinstance(result.data, dict):
            try:
                doc = validate(result.data.get("cv"))
            except SchemaError as e:
                logger.warning(f"{action} returned an invalid CV: {e.message}")
        used_fallback = doc is None
        if used_fallback:
            logger.info(f"Using local {action} fallback ({result.error or 'invalid answer'})")
            doc = fallback()
        outcome = self._apply_document(token, doc, used_fallback)
        outcome.error = result.error
        return outcome

    def adapt(self, job_description: str) -> Outcome:
        job_description = (job_description or "").strip()
        if not job_description:
            return Outcome(error="CV data and job description are required.")
        cv = self.doc
        return self._document_action(
            "adapt-cv",
            {"cv": cv.to_dict(), "jobDescription": job_description},
            lambda: fallbacks.fallback_adapt_cv(cv, job_description),
        )

    def optimize_ats(self) -> Outcome:
        cv = self.doc
        return self._document_action(
            "optimize-ats",
            {"cv": cv.to_dict()},
            lambda: fallbacks.fallback_optimize_ats(cv),
        )

    def import_resume(self, text: Optional[str] = None, data: Optional[bytes] = None, mime_hint: str = "") -> Outcome:
        """
        Import pasted text or an uploaded file. Structured JSON is taken as
        is; anything else goes through the AI. There is no local fallback,
        so a failure leaves the current document untouched.
        """
        token = self._token()
        if data is not None:
            try:
                text = extract_text_from_file(data, mime_hint)
            except ExtractionError as e:
                return Outcome(error=e.message)
        text = (text or "").strip()
        if not text:
            return Outcome(error="Resume text is required for AI import.")

        direct = parse_structured_cv(text)
        if direct is not None:
            return self._apply_document(token, direct, False)

        result = self.client.request_ai("import-cv", {"text": text})
        if result.fallback or not isinstance(result.data, dict):
            return Outcome(error=result.error or "AI could not structure that resume yet.")
        try:
            doc = validate(result.data.get("cv"))
        except SchemaError as e:
            logger.warning(f"Imported CV is invalid: {e.message}")
            return Outcome(error=f"Invalid CV data: {e.message}")
        return self._apply_document(token, doc, False)

    def import_json(self, raw: str) -> Outcome:
        try:
            data = json.loads(raw)
        except ValueError as e:
            return Outcome(error=f"Invalid JSON: {e}")
        try:
            return Outcome(applied=True, value=self.replace(data))
        except SchemaError as e:
            return Outcome(error=f"Invalid CV data: {e.message}")

    def motivation_letter(self, job_position: str, language: str = "en") -> Outcome:
        cv = self.doc
        result = self.client.request_ai(
            "generate-motivation-letter",
            {"cv": cv.to_dict(), "jobPosition": job_position, "language": language},
        )
        letter = result.data.get("letter") if isinstance(result.data, dict) else None
        if result.fallback or not isinstance(letter, str) or not letter.strip():
            if result.status == 400:
                return Outcome(error=result.error)
            return Outcome(value=fallbacks.fallback_letter(cv, job_position, language), fallback=True, error=result.error)
        return Outcome(value=letter)

    def analyze_internship(self, internship_text: str) -> Outcome:
        result = self.client.request_ai(
            "analyze-internship",
            {"cv": self.doc.to_dict(), "internshipText": internship_text},
        )
        if result.fallback or not isinstance(result.data, dict):
            return Outcome(error=result.error or "Failed to analyze internship document.")
        return Outcome(value=result.data)

    def internship_emails(self, context: Dict[str, Any], selected_subject: str) -> Outcome:
        """``context`` is the handoff object returned by ``analyze_internship``."""
        result = self.client.request_ai(
            "generate-internship-emails",
            {"cv": self.doc.to_dict(), "context": context, "selectedSubject": selected_subject},
        )
        if result.fallback or not isinstance(result.data, dict):
            return Outcome(error=result.error or "Failed to generate internship emails.")
        return Outcome(value=result.data)
