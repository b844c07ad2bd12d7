
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
Turns user-supplied documents into plain text: uploaded resumes and
internship offers (PDF, DOCX, JSON, text) and job posts given as a URL.
"""

import io
import logging

import requests
from bs4 import BeautifulSoup
from docx import Document
from pypdf import PdfReader

from cv_builder.config import get_ca_bundle
from cv_builder.errors import ExtractionError

logger = logging.getLogger(__name__)

PDF_TYPES = ("application/pdf", ".pdf")
DOCX_TYPES = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".docx",
)
TEXT_TYPES = ("application/json", ".json", ".txt", ".md")

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)


def _matches(mime_hint: str, kinds: tuple) -> bool:
    return any(mime_hint == k or mime_hint.endswith(k) for k in kinds)


def read_pdf(data: bytes) -> str:
    """Extracts text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(data))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    except Exception as e:
        logger.error(f"Error reading PDF: {e}")
        raise ExtractionError(f"Could not read PDF document: {e}") from e


def read_docx(data: bytes) -> str:
    """Extracts paragraph text from DOCX bytes."""
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        logger.error(f"Error reading DOCX: {e}")
        raise ExtractionError(f"Could not read Word document: {e}") from e
    return "\n".join(p.text for p in doc.paragraphs)


def extract_text_from_file(data: bytes, mime_hint: str) -> str:
    """
    Extract plain text from an uploaded file.

    Args:
        data: Raw file bytes.
        mime_hint: MIME type or file name (the extension is enough).

    Raises:
        ExtractionError: unsupported format, unreadable or empty document.
    """
    hint = (mime_hint or "").strip().lower()
    if _matches(hint, PDF_TYPES):
        text = read_pdf(data)
    elif _matches(hint, DOCX_TYPES):
        text = read_docx(data)
    elif hint.startswith("text/") or _matches(hint, TEXT_TYPES):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = data.decode("latin-1")
    else:
        raise ExtractionError(f"Unsupported document type: {mime_hint or 'unknown'}")

    text = text.strip()
    if not text:
        raise ExtractionError("No text could be extracted from the document")
    logger.debug(f"Extracted {len(text)} characters ({hint})")
    return text


def extract_text_from_html(html) -> str:
    """Extracts clean text from raw HTML content."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()

    lines = (line.strip() for line in soup.get_text().splitlines())
    chunks = (phrase.strip() for line in lines for phrase in line.split("  "))
    return "\n".join(chunk for chunk in chunks if chunk)


def read_url(url: str, timeout: float = 15) -> str:
    """Fetches a job post and returns its visible text."""
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout, verify=get_ca_bundle())
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Failed to fetch {url}: {e}")
        raise ExtractionError(f"Could not fetch {url}: {e}") from e

    text = extract_text_from_html(response.content)
    if not text:
        raise ExtractionError(f"No readable text at {url}")
    return text
