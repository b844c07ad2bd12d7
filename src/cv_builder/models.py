
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
Plain data objects passed between the gateway, the task operations and
the client-side workspace. The CV itself lives in ``cv_builder.schema``.
"""

from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")

DEFAULT_PROVIDERS = ("default", "gemini")
ALTERNATE_PROVIDERS = ("alternate", "openrouter")


@dataclass
class AIConfig:
    """Per-request AI settings chosen by the user (never stored server-side)."""
    provider: str = "default"
    api_key: str = ""
    model: str = ""
    site_url: str = ""
    site_name: str = ""

    @property
    def is_alternate(self) -> bool:
        return self.provider in ALTERNATE_PROVIDERS

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["AIConfig"]:
        """Build from the camelCase wire record; ``None`` for absent config."""
        if not isinstance(data, dict) or not data:
            return None

        def text(key: str) -> str:
            value = data.get(key)
            return value.strip() if isinstance(value, str) else ""

        provider = text("provider").lower() or "default"
        if provider not in DEFAULT_PROVIDERS + ALTERNATE_PROVIDERS:
            provider = "default"
        return cls(
            provider=provider,
            api_key=text("apiKey"),
            model=text("model"),
            site_url=text("siteUrl"),
            site_name=text("siteName"),
        )

    def to_dict(self) -> dict:
        data = {"provider": self.provider}
        if self.api_key:
            data["apiKey"] = self.api_key
        if self.model:
            data["model"] = self.model
        if self.site_url:
            data["siteUrl"] = self.site_url
        if self.site_name:
            data["siteName"] = self.site_name
        return data


@dataclass
class TaskResult(Generic[T]):
    """Outcome of a task operation; ``fallback`` marks a non-AI result."""
    value: T
    fallback: bool = False
    message: str = ""


@dataclass
class InternshipSubject:
    subject: str
    explanation: str

    def to_dict(self) -> dict:
        return {"subject": self.subject, "explanation": self.explanation}


@dataclass
class InternshipContext:
    """
    Handoff between ``analyze-internship`` and ``generate-internship-emails``.
    Returned by the first step and passed back explicitly to the second.
    """
    internship_text: str
    company_email: Optional[str] = None
    company_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["InternshipContext"]:
        if not isinstance(data, dict):
            return None
        text = data.get("internshipText")
        if not isinstance(text, str) or not text.strip():
            return None
        return cls(
            internship_text=text,
            company_email=data.get("companyEmail") or None,
            company_name=data.get("companyName") or None,
        )

    def to_dict(self) -> dict:
        return {
            "internshipText": self.internship_text,
            "companyEmail": self.company_email,
            "companyName": self.company_name,
        }


@dataclass
class InternshipAnalysis:
    subjects: List[InternshipSubject]
    context: InternshipContext

    def to_dict(self) -> dict:
        return {
            "subjects": [s.to_dict() for s in self.subjects],
            "companyEmail": self.context.company_email,
            "companyName": self.context.company_name,
            "context": self.context.to_dict(),
        }


@dataclass
class InternshipEmails:
    applicant_email: str
    company_email: str
    recipient: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "applicantEmail": self.applicant_email,
            "companyEmail": self.company_email,
            "recipient": self.recipient,
        }


@dataclass
class AIResult(Generic[T]):
    """
    What the client-side request helper hands back to the UI layer.
    ``fallback`` means "the caller should now run its own local fallback".
    """
    data: Optional[T] = None
    fallback: bool = False
    error: Optional[str] = None
    status: Optional[int] = None
