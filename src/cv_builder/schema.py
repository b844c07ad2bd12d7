
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
Canonical CV schema and the helpers that turn loose JSON (user payloads,
LLM output) into a well-formed CVDocument.

Wire names are camelCase (``fullName``, ``startDate``); attributes are
snake_case.
"""

import json
import re
import logging
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from cv_builder.errors import SchemaError

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Candidate"
PLACEHOLDER_EMAIL = "candidate@example.com"

EXPERIENCE_HIGHLIGHT_LIMIT = 260
EDUCATION_HIGHLIGHT_LIMIT = 200
PROJECT_HIGHLIGHT_LIMIT = 220

# Keys whose value is a list anywhere in the document
LIST_FIELDS = frozenset({
    "experience", "education", "projects", "highlights",
    "skills", "certifications", "languages",
})

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


def _as_text(value: Any) -> str:
    """Zero-value coercion for optional string fields."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _as_lines(value: Any, limit: Optional[int] = None) -> List[str]:
    """Coerce to a list of non-empty strings, truncating to ``limit``."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    lines = []
    for item in value:
        text = _as_text(item)
        if limit and len(text) > limit:
            text = text[:limit].rstrip()
        if text:
            lines.append(text)
    return lines


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.match(value.strip()))


class _CVModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class PersonalInfo(_CVModel):
    full_name: str = Field(min_length=1)
    title: str = ""
    summary: str = ""
    email: str
    phone: str = ""
    location: str = ""
    website: str = ""
    linkedin: str = ""
    photo_style: Literal["square", "circle"] = "square"

    @field_validator("title", "summary", "phone", "location", "website", "linkedin", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _as_text(value)

    @field_validator("photo_style", mode="before")
    @classmethod
    def _photo_style(cls, value):
        return value if value in ("square", "circle") else "square"

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise ValueError("Add a valid email")
        return value


class ExperienceEntry(_CVModel):
    id: str = ""
    role: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    highlights: List[str] = Field(default_factory=list)

    @field_validator("id", "location", "start_date", "end_date", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _as_text(value)

    @field_validator("highlights", mode="before")
    @classmethod
    def _highlights(cls, value):
        return _as_lines(value, EXPERIENCE_HIGHLIGHT_LIMIT)


class EducationEntry(_CVModel):
    id: str = ""
    school: str = Field(min_length=1)
    degree: str = Field(min_length=1)
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    highlights: List[str] = Field(default_factory=list)

    @field_validator("id", "location", "start_date", "end_date", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _as_text(value)

    @field_validator("highlights", mode="before")
    @classmethod
    def _highlights(cls, value):
        return _as_lines(value, EDUCATION_HIGHLIGHT_LIMIT)


class ProjectEntry(_CVModel):
    id: str = ""
    name: str = Field(min_length=1)
    summary: str = ""
    link: str = ""
    highlights: List[str] = Field(default_factory=list)

    @field_validator("id", "summary", "link", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _as_text(value)

    @field_validator("highlights", mode="before")
    @classmethod
    def _highlights(cls, value):
        return _as_lines(value, PROJECT_HIGHLIGHT_LIMIT)


class CVDocument(_CVModel):
    """The canonical, validated CV."""
    personal: PersonalInfo
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)

    @field_validator("experience", "education", "projects", mode="before")
    @classmethod
    def _entries(cls, value):
        return value if isinstance(value, list) else []

    @field_validator("skills", "certifications", "languages", mode="before")
    @classmethod
    def _lines(cls, value):
        return _as_lines(value)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)

    def find_experience(self, entry_id: str) -> Optional[ExperienceEntry]:
        return next((e for e in self.experience if e.id == entry_id), None)


def _error_path(error: PydanticValidationError) -> tuple[str, str]:
    first = error.errors()[0]
    path = ".".join(str(part) for part in first.get("loc", ()))
    return path, first.get("msg", "invalid value")


def sanitize_nulls(candidate: Any, key: Optional[str] = None) -> Any:
    """
    Recursively replace ``null`` with ``[]`` for list-typed CV fields and
    ``""`` everywhere else. ``null`` items inside lists are dropped.
    """
    if candidate is None:
        return [] if key in LIST_FIELDS else ""
    if isinstance(candidate, dict):
        return {k: sanitize_nulls(v, k) for k, v in candidate.items()}
    if isinstance(candidate, list):
        return [sanitize_nulls(item) for item in candidate if item is not None]
    return candidate


def ensure_ids(doc: CVDocument) -> CVDocument:
    """
    Give every experience/education/project entry a non-empty id that is
    unique within its list. Missing or duplicate ids become
    ``ai_<kind>_<index>``.
    """
    updates = {}
    for field_name, kind in (("experience", "experience"), ("education", "education"), ("projects", "project")):
        entries = getattr(doc, field_name)
        taken = {e.id for e in entries if e.id}
        seen = set()
        fixed = []
        for index, entry in enumerate(entries):
            if entry.id and entry.id not in seen:
                seen.add(entry.id)
                fixed.append(entry)
                continue
            counter = index
            new_id = f"ai_{kind}_{counter}"
            while new_id in taken or new_id in seen:
                counter += 1
                new_id = f"ai_{kind}_{counter}"
            seen.add(new_id)
            fixed.append(entry.model_copy(update={"id": new_id}))
        updates[field_name] = fixed
    return doc.model_copy(update=updates)


def validate(candidate: Any) -> CVDocument:
    """
    Validate ``candidate`` into a CVDocument.

    Optional fields are coerced to their zero value; missing or mistyped
    required fields raise SchemaError naming the first violated path.
    Idempotent: ``validate(validate(x)) == validate(x)``.
    """
    if isinstance(candidate, CVDocument):
        candidate = candidate.to_dict()
    if not isinstance(candidate, dict):
        raise SchemaError("", "CV data must be a JSON object")
    try:
        doc = CVDocument.model_validate(candidate)
    except PydanticValidationError as e:
        path, message = _error_path(e)
        raise SchemaError(path, message) from e
    return ensure_ids(doc)


def validate_experience(candidate: Any) -> ExperienceEntry:
    """Validate a single experience entry (id is left as supplied)."""
    if isinstance(candidate, ExperienceEntry):
        return candidate
    if not isinstance(candidate, dict):
        raise SchemaError("experience", "Experience entry must be a JSON object")
    try:
        return ExperienceEntry.model_validate(sanitize_nulls(candidate))
    except PydanticValidationError as e:
        path, message = _error_path(e)
        raise SchemaError(f"experience.{path}", message) from e


def repair_personal(candidate: dict, fallback: Optional[CVDocument] = None) -> dict:
    """
    Patch the personal block of raw AI JSON so that one bad field does not
    sink a whole import/adaptation: blank names and unusable emails are
    replaced from ``fallback`` or with placeholder sentinels.
    """
    personal = candidate.get("personal")
    personal = dict(personal) if isinstance(personal, dict) else {}

    name = personal.get("fullName")
    if not isinstance(name, str) or not name.strip():
        personal["fullName"] = fallback.personal.full_name if fallback else PLACEHOLDER_NAME

    if not is_valid_email(personal.get("email")):
        personal["email"] = fallback.personal.email if fallback else PLACEHOLDER_EMAIL

    return {**candidate, "personal": personal}


def restore_ids(candidate: dict, original: CVDocument) -> dict:
    """Carry ids over by position where AI output dropped them."""
    restored = dict(candidate)
    for field_name in ("experience", "education", "projects"):
        entries = candidate.get(field_name)
        if not isinstance(entries, list):
            continue
        source = getattr(original, field_name)
        patched = []
        for index, entry in enumerate(entries):
            if isinstance(entry, dict) and not entry.get("id") and index < len(source):
                entry = {**entry, "id": source[index].id}
            patched.append(entry)
        restored[field_name] = patched
    return restored


def parse_structured_cv(text: str) -> Optional[CVDocument]:
    """Return a CVDocument if ``text`` is JSON matching the schema, else None."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    try:
        return validate(sanitize_nulls(data))
    except SchemaError as e:
        logger.info(f"Pasted JSON does not match the CV schema: {e.message}")
        return None


def default_cv() -> CVDocument:
    """Placeholder CV a new session starts with."""
    return validate({
        "personal": {
            "fullName": "Jordan Smith",
            "title": "Senior Product Designer",
            "summary": "Human-centered designer with 7+ years crafting digital experiences that balance UX rigor with business outcomes.",
            "email": "jordan.smith@example.com",
            "phone": "+33 6 12 34 56 78",
            "location": "Paris, France",
            "website": "https://jordansmith.design",
            "linkedin": "https://linkedin.com/in/jordansmith",
        },
        "experience": [
            {
                "id": "cv_flowly",
                "role": "Lead Product Designer",
                "company": "Flowly",
                "location": "Remote",
                "startDate": "2022",
                "endDate": "Present",
                "highlights": [
                    "Shipped a design system refresh that increased design-dev velocity by 35% and reduced inconsistencies across 4 products.",
                    "Partnered with PM and data to launch AI onboarding, improving activation by 18% through contextual nudges.",
                    "Facilitated weekly design critiques and mentorship for a team of 5 designers, raising NPS from 32 to 54.",
                ],
            },
            {
                "id": "cv_atlas",
                "role": "Product Designer",
                "company": "Atlas HR",
                "location": "Lyon, France",
                "startDate": "2019",
                "endDate": "2022",
                "highlights": [
                    "Redesigned analytics workflows that cut report creation time by 42% and lifted retention by 9%.",
                    "Ran continuous discovery with 40+ interviews each quarter to validate roadmap bets and reduce churn.",
                ],
            },
        ],
        "education": [
            {
                "id": "cv_ensa",
                "school": "ENSA Lyon",
                "degree": "M.Des. Interaction Design",
                "location": "Lyon, France",
                "startDate": "2016",
                "endDate": "2018",
                "highlights": ["Thesis on adaptive interfaces for neurodiverse teams, awarded jury distinction."],
            },
        ],
        "projects": [
            {
                "id": "cv_portfolio",
                "name": "Portfolio Platform",
                "summary": "Modular case study builder for creative teams.",
                "link": "https://portfolio-template.dev",
                "highlights": [
                    "Architected component library that enabled non-designers to ship branded pages in under 10 minutes.",
                    "Implemented analytics guardrails and privacy controls adopted by 200+ teams in beta.",
                ],
            },
        ],
        "skills": ["Design systems", "Product discovery", "Figma", "User research", "Design ops", "Prototyping"],
        "certifications": ["Google UX Design Professional Certificate"],
        "languages": ["English", "French"],
    })
