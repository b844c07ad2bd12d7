
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
Helpers that make free-form LLM output usable: fence stripping, JSON
object recovery, bullet normalisation and keyword extraction.
"""

import re
from typing import Iterable, List

from cv_builder.errors import ExtractionError

_BULLET_MARKER_RE = re.compile(r"^[\-\*•·‣▪●–—\d\.\)\s]+")
_LIST_MARKER_RE = re.compile(r"^[\-\*•\s]+")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_KEYWORD_SPLIT_RE = re.compile(r"[,\n;]")


def strip_code_fences(text: str) -> str:
    """Remove a leading ``` fence line and its closing fence, if present."""
    trimmed = (text or "").strip()
    if not trimmed.startswith("```"):
        return trimmed

    lines = trimmed.split("\n")
    lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def extract_json_object(text: str) -> str:
    """
    Return the substring between the first '{' and the last '}' of the
    fence-stripped text. Raises ExtractionError when there is none.
    """
    cleaned = strip_code_fences(text)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ExtractionError("AI response did not include a JSON object")
    return cleaned[start:end + 1]


def sanitize_bullet(line: str) -> str:
    """Strip leading list markers / numbering and collapse whitespace."""
    stripped = _BULLET_MARKER_RE.sub("", line or "")
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def strip_list_marker(line: str) -> str:
    """Strip leading dash, star or bullet markers only; numbers are content."""
    stripped = _LIST_MARKER_RE.sub("", line or "")
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def split_bullets(text: str, min_length: int = 5, limit: int = 5) -> List[str]:
    """One sanitised bullet per non-trivial line, capped at ``limit``."""
    bullets = [sanitize_bullet(line) for line in (text or "").splitlines()]
    return [b for b in bullets if len(b) >= min_length][:limit]


def dedupe(values: Iterable[str]) -> List[str]:
    """Drop empties and duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def dedupe_casefold(values: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        key = value.casefold() if value else ""
        if key and key not in seen:
            seen.add(key)
            result.append(value)
    return result


def extract_keywords(text: str, max_keywords: int = 10) -> List[str]:
    """
    Lowercase alphanumeric tokens longer than three characters,
    deduplicated in first-seen order and capped at ``max_keywords``.
    """
    tokens = _NON_ALNUM_RE.split((text or "").lower())
    return dedupe(t for t in tokens if len(t) > 3)[:max(0, max_keywords)]


def parse_keyword_list(text: str, max_keywords: int = 20) -> List[str]:
    """Parse a comma/semicolon/newline separated keyword list from an LLM."""
    items = (sanitize_bullet(item).lower() for item in _KEYWORD_SPLIT_RE.split(text or ""))
    return dedupe(item for item in items if len(item) > 2)[:max_keywords]


def title_case(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest alone."""
    return " ".join(part[:1].upper() + part[1:] for part in (text or "").split(" "))


def merge_skills(current: List[str], new: List[str], max_skills: int = 18) -> List[str]:
    """New skills first (title-cased), then existing ones, case-insensitively unique."""
    return dedupe_casefold([title_case(s) for s in new] + list(current))[:max_skills]
