
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
Renders a validated CV (and the motivation letter) to MS Word (DOCX).
"""

import io
import logging
from datetime import date
from typing import Any, Optional

from docx import Document
from docx.shared import Inches, Pt

from cv_builder.schema import CVDocument, validate

logger = logging.getLogger(__name__)

STYLES = {
    "title": "Title",
    "h1": "Heading 1",
    "bullet": "List Bullet",
}


def _date_range(start: str, end: str) -> str:
    return " – ".join(part for part in (start, end) if part)


def _setup_styles(document) -> None:
    style = document.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)


def _save(document) -> bytes:
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _add_header(document, cv: CVDocument) -> None:
    p = cv.personal
    document.add_paragraph(p.full_name, style=STYLES["title"])
    if p.title:
        document.add_paragraph().add_run(p.title).bold = True
    contact = " | ".join(v for v in (p.email, p.phone, p.location) if v)
    if contact:
        document.add_paragraph(contact)
    links = " | ".join(v for v in (p.website, p.linkedin) if v)
    if links:
        document.add_paragraph(links)


def _add_bullets(document, lines) -> None:
    for line in lines:
        document.add_paragraph(line, style=STYLES["bullet"])


def render_cv(cv: Any, photo: Optional[bytes] = None) -> bytes:
    """
    Render ``cv`` to DOCX bytes.

    Only fully validated data is rendered: anything that is not already a
    CVDocument goes through ``validate`` first (raising SchemaError).
    """
    if not isinstance(cv, CVDocument):
        cv = validate(cv)

    document = Document()
    _setup_styles(document)

    if photo:
        try:
            document.add_picture(io.BytesIO(photo), width=Inches(1.2))
        except Exception as e:
            logger.warning(f"Skipping unreadable photo: {e}")

    _add_header(document, cv)

    if cv.personal.summary:
        document.add_paragraph("PROFILE", style=STYLES["h1"])
        document.add_paragraph(cv.personal.summary)

    if cv.experience:
        document.add_paragraph("PROFESSIONAL EXPERIENCE", style=STYLES["h1"])
        for job in cv.experience:
            p = document.add_paragraph()
            p.add_run(job.role).bold = True
            p.add_run(f" | {job.company}")
            if job.location:
                p.add_run(f" | {job.location}")
            dates = _date_range(job.start_date, job.end_date)
            if dates:
                p.add_run(f" | {dates}").italic = True
            _add_bullets(document, job.highlights)

    if cv.education:
        document.add_paragraph("EDUCATION", style=STYLES["h1"])
        for edu in cv.education:
            p = document.add_paragraph()
            p.add_run(edu.degree).bold = True
            p.add_run(f", {edu.school}")
            dates = _date_range(edu.start_date, edu.end_date)
            if dates:
                p.add_run(f" | {dates}").italic = True
            _add_bullets(document, edu.highlights)

    if cv.projects:
        document.add_paragraph("PROJECTS", style=STYLES["h1"])
        for project in cv.projects:
            p = document.add_paragraph()
            p.add_run(project.name).bold = True
            if project.link:
                p.add_run(f" | {project.link}")
            if project.summary:
                document.add_paragraph(project.summary)
            _add_bullets(document, project.highlights)

    for heading, values in (
        ("SKILLS", cv.skills),
        ("CERTIFICATIONS", cv.certifications),
        ("LANGUAGES", cv.languages),
    ):
        if values:
            document.add_paragraph(heading, style=STYLES["h1"])
            document.add_paragraph(", ".join(values))

    logger.info(f"Rendered CV for {cv.personal.full_name}")
    return _save(document)


def render_letter(cv: Any, letter: str) -> bytes:
    """Render a motivation letter with the same header as the CV."""
    if not isinstance(cv, CVDocument):
        cv = validate(cv)

    document = Document()
    _setup_styles(document)
    _add_header(document, cv)
    document.add_paragraph()
    document.add_paragraph(date.today().strftime("%B %d, %Y"))
    document.add_paragraph()

    for paragraph in letter.split("\n"):
        if paragraph.strip():
            document.add_paragraph(paragraph.strip())

    return _save(document)
