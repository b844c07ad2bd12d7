
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
Single entry point for AI requests: ``Gateway.handle(action, payload, config)``.

Checks that some AI credential is usable, parses the action-specific
payload once, dispatches to the task operation and normalises every
outcome into an Envelope (status code + flat JSON body).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Callable, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from cv_builder.assistant import CVAssistant
from cv_builder.errors import CVBuilderError, NotConfiguredError, ProcessingError, SchemaError, ValidationError
from cv_builder.models import AIConfig, InternshipContext
from cv_builder.schema import validate, validate_experience

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "AI service is not configured."
UNSUPPORTED_MESSAGE = "Unsupported AI action."
INTERNAL_MESSAGE = "AI request failed."


class Action(str, Enum):
    ENHANCE_SUMMARY = "enhance-summary"
    ENHANCE_EXPERIENCE = "enhance-experience"
    ADAPT_CV = "adapt-cv"
    IMPORT_CV = "import-cv"
    OPTIMIZE_ATS = "optimize-ats"
    MOTIVATION_LETTER = "generate-motivation-letter"
    ANALYZE_INTERNSHIP = "analyze-internship"
    INTERNSHIP_EMAILS = "generate-internship-emails"

    @classmethod
    def parse(cls, value: Any) -> Optional["Action"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Envelope:
    status: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status == 200

    @classmethod
    def error(cls, status: int, message: str) -> "Envelope":
        return cls(status, {"error": message})


# --- Payload schemas ---------------------------------------------------

class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _required_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("must be a non-empty string")
    return value


RequiredText = Annotated[str, BeforeValidator(_required_text)]


class EnhanceSummaryPayload(_Payload):
    summary: RequiredText
    context: Optional[str] = None

    @field_validator("context", mode="before")
    @classmethod
    def _context(cls, value):
        return value if isinstance(value, str) else None


class EnhanceExperiencePayload(_Payload):
    experience: Dict[str, Any]
    job_description: Optional[str] = None

    @field_validator("job_description", mode="before")
    @classmethod
    def _job(cls, value):
        return value if isinstance(value, str) else None


class AdaptCVPayload(_Payload):
    cv: Dict[str, Any]
    job_description: RequiredText


class ImportCVPayload(_Payload):
    text: RequiredText


class OptimizeATSPayload(_Payload):
    cv: Dict[str, Any]


class MotivationLetterPayload(_Payload):
    cv: Dict[str, Any]
    job_position: RequiredText
    language: str = "en"

    @field_validator("language", mode="before")
    @classmethod
    def _language(cls, value):
        return value.strip().lower() if isinstance(value, str) and value.strip() else "en"


class AnalyzeInternshipPayload(_Payload):
    cv: Dict[str, Any]
    internship_text: RequiredText


class InternshipEmailsPayload(_Payload):
    cv: Dict[str, Any]
    selected_subject: RequiredText
    internship_text: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def resolve_context(self) -> Optional[InternshipContext]:
        context = InternshipContext.from_dict(self.context)
        if context is None and isinstance(self.internship_text, str) and self.internship_text.strip():
            return InternshipContext(internship_text=self.internship_text)
        if context is not None and self.internship_text and self.internship_text.strip():
            context.internship_text = self.internship_text
        return context


# payload class, message for a malformed payload, message for a processing failure
_SPECS: Dict[Action, tuple] = {
    Action.ENHANCE_SUMMARY: (EnhanceSummaryPayload, "Summary is required.", "Failed to enhance summary."),
    Action.ENHANCE_EXPERIENCE: (EnhanceExperiencePayload, "Experience payload is missing.", "Failed to enhance experience."),
    Action.ADAPT_CV: (AdaptCVPayload, "CV data and job description are required.", "Failed to adapt CV."),
    Action.IMPORT_CV: (ImportCVPayload, "Resume text is required for AI import.", "AI could not structure that resume yet."),
    Action.OPTIMIZE_ATS: (OptimizeATSPayload, "CV data is required for ATS optimization.", "Failed to optimize CV for ATS."),
    Action.MOTIVATION_LETTER: (MotivationLetterPayload, "CV data and job position are required.", "Failed to generate motivation letter."),
    Action.ANALYZE_INTERNSHIP: (AnalyzeInternshipPayload, "CV data and internship text are required.", "Failed to analyze internship document."),
    Action.INTERNSHIP_EMAILS: (
        InternshipEmailsPayload,
        "CV data, internship text, and selected subject are required.",
        "Failed to generate internship emails.",
    ),
}


def _with_fallback(body: Dict[str, Any], result) -> Dict[str, Any]:
    body["fallback"] = result.fallback
    if result.message:
        body["message"] = result.message
    return body


class Gateway:
    """Dispatches gateway requests to a CVAssistant."""
    def __init__(self, assistant: CVAssistant):
        self.assistant = assistant
        self._handlers: Dict[Action, Callable[[Any, Optional[AIConfig]], Dict[str, Any]]] = {
            Action.ENHANCE_SUMMARY: self._enhance_summary,
            Action.ENHANCE_EXPERIENCE: self._enhance_experience,
            Action.ADAPT_CV: self._adapt_cv,
            Action.IMPORT_CV: self._import_cv,
            Action.OPTIMIZE_ATS: self._optimize_ats,
            Action.MOTIVATION_LETTER: self._motivation_letter,
            Action.ANALYZE_INTERNSHIP: self._analyze_internship,
            Action.INTERNSHIP_EMAILS: self._internship_emails,
        }
        missing = set(Action) - set(self._handlers) or set(Action) - set(_SPECS)
        if missing:
            raise RuntimeError(f"No gateway handler for: {sorted(a.value for a in missing)}")

    @property
    def adapter(self):
        return self.assistant.adapter

    def handle(self, action: Any, payload: Any, config: Any = None) -> Envelope:
        ai_config = config if isinstance(config, AIConfig) else AIConfig.from_dict(config)
        if not self.adapter.is_available(ai_config):
            return Envelope.error(503, NOT_CONFIGURED_MESSAGE)

        parsed_action = Action.parse(action)
        if parsed_action is None:
            return Envelope.error(400, UNSUPPORTED_MESSAGE)

        payload_class, invalid_message, failed_message = _SPECS[parsed_action]
        if not isinstance(payload, dict):
            return Envelope.error(400, invalid_message)
        try:
            request = payload_class.model_validate(payload)
        except PydanticValidationError:
            return Envelope.error(400, invalid_message)

        try:
            body = self._handlers[parsed_action](request, ai_config)
        except SchemaError as e:
            logger.info(f"{parsed_action.value}: invalid CV payload ({e.message})")
            return Envelope.error(400, f"Invalid CV data: {e.message}")
        except ValidationError as e:
            return Envelope.error(400, e.message)
        except NotConfiguredError as e:
            logger.warning(f"{parsed_action.value}: {e.message}")
            return Envelope.error(503, NOT_CONFIGURED_MESSAGE)
        except ProcessingError as e:
            logger.error(f"{parsed_action.value} failed: {e.message}")
            return Envelope.error(422, failed_message)
        except CVBuilderError as e:
            logger.error(f"{parsed_action.value} failed ({e.kind}): {e.message}")
            return Envelope.error(e.status, failed_message)
        except Exception:
            logger.exception(f"/api/ai {parsed_action.value} error")
            return Envelope.error(500, INTERNAL_MESSAGE)
        return Envelope(200, body)

    # --- Handlers ------------------------------------------------------

    def _enhance_summary(self, request: EnhanceSummaryPayload, config):
        result = self.assistant.enhance_summary(request.summary, request.context, config)
        return _with_fallback({"summary": result.value}, result)

    def _enhance_experience(self, request: EnhanceExperiencePayload, config):
        entry = validate_experience(request.experience)
        if not entry.id:
            entry = entry.model_copy(update={"id": "ai_experience_0"})
        result = self.assistant.enhance_experience(entry, request.job_description, config=config)
        return _with_fallback({"experience": result.value.model_dump(by_alias=True)}, result)

    def _adapt_cv(self, request: AdaptCVPayload, config):
        result = self.assistant.adapt_cv(validate(request.cv), request.job_description, config)
        return _with_fallback({"cv": result.value.to_dict()}, result)

    def _import_cv(self, request: ImportCVPayload, config):
        result = self.assistant.import_cv(request.text, config)
        body = {"cv": result.value.to_dict()}
        if result.message:
            body["reason"] = result.message
        return body

    def _optimize_ats(self, request: OptimizeATSPayload, config):
        result = self.assistant.optimize_ats(validate(request.cv), config)
        return _with_fallback({"cv": result.value.to_dict()}, result)

    def _motivation_letter(self, request: MotivationLetterPayload, config):
        result = self.assistant.generate_motivation_letter(
            validate(request.cv), request.job_position, request.language, config
        )
        return _with_fallback({"letter": result.value}, result)

    def _analyze_internship(self, request: AnalyzeInternshipPayload, config):
        result = self.assistant.suggest_internship_subjects(request.internship_text, validate(request.cv), config)
        return result.value.to_dict()

    def _internship_emails(self, request: InternshipEmailsPayload, config):
        context = request.resolve_context()
        if context is None:
            raise ValidationError(_SPECS[Action.INTERNSHIP_EMAILS][1])
        result = self.assistant.generate_internship_emails(context, validate(request.cv), request.selected_subject, config)
        return result.value.to_dict()


def build_gateway(settings=None, adapter=None) -> Gateway:
    """Wire settings → provider adapter → assistant → gateway."""
    from cv_builder.config import Settings
    from cv_builder.providers import ProviderAdapter

    settings = settings or Settings.from_env()
    adapter = adapter or ProviderAdapter(settings)
    return Gateway(CVAssistant(adapter, max_workers=settings.max_workers))
