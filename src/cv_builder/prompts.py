
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
Prompt builders, one per AI task.

Every builder is a pure function: identical inputs give a byte-identical
prompt. JSON-returning tasks embed a literal example of the target shape.
"""

import json
from typing import List, Optional

from cv_builder.schema import CVDocument, ExperienceEntry

CV_IMPORT_EXAMPLE = {
    "personal": {
        "fullName": "John Doe",
        "title": "Software Engineer",
        "summary": "Brief professional summary",
        "email": "john@example.com",
        "phone": "+1234567890",
        "location": "City, Country",
        "website": "https://example.com",
        "linkedin": "https://linkedin.com/in/johndoe",
    },
    "experience": [
        {
            "id": "exp1",
            "role": "Senior Engineer",
            "company": "Tech Corp",
            "location": "San Francisco",
            "startDate": "Jan 2020",
            "endDate": "Present",
            "highlights": ["Led team of 5 engineers", "Increased performance by 40%"],
        }
    ],
    "education": [
        {
            "id": "edu1",
            "school": "University Name",
            "degree": "Bachelor of Science in Computer Science",
            "location": "City",
            "startDate": "2015",
            "endDate": "2019",
            "highlights": ["GPA: 3.8"],
        }
    ],
    "projects": [
        {
            "id": "proj1",
            "name": "Project Name",
            "summary": "Brief description",
            "link": "https://github.com/user/repo",
            "highlights": ["Built with React", "10k+ users"],
        }
    ],
    "skills": ["JavaScript", "Python", "React"],
    "certifications": ["AWS Certified"],
    "languages": ["English", "Spanish"],
}

INTERNSHIP_SUBJECTS_EXAMPLE = """{
  "subjects": [
    {
      "subject": "...",
      "explanation": "..."
    }
  ],
  "companyEmail": "email@company.com or null",
  "companyName": "Company Name or null"
}"""

INTERNSHIP_EMAILS_EXAMPLE = """{
  "applicantEmail": "Subject: ...\\n\\nDear ...",
  "companyEmail": "Subject: ...\\n\\nDear ..."
}"""


def _lines(*parts: str) -> str:
    return "\n".join(p for p in parts if p)


def _candidate_profile(cv: CVDocument, with_contact: bool = False) -> str:
    """Short CV digest used by the internship prompts."""
    p = cv.personal
    rows = [
        "Candidate Profile:",
        f"- Name: {p.full_name}",
        f"- Title: {p.title}",
        f"- Summary: {p.summary}",
    ]
    if with_contact:
        rows += [f"- Email: {p.email}", f"- Phone: {p.phone}", f"- Location: {p.location}"]
    rows += [
        f"- Skills: {', '.join(cv.skills)}",
        f"- Recent Experience: {'; '.join(f'{e.role} at {e.company}' for e in cv.experience[:2])}",
        f"- Education: {'; '.join(f'{e.degree} from {e.school}' for e in cv.education[:2])}",
    ]
    return "\n".join(rows)


def summary_enhancement_prompt(summary: str, context: Optional[str] = None) -> str:
    return _lines(
        "You are a career coach polishing a professional summary.",
        f"Context: {context}" if context else "",
        "Rewrite the summary to sound confident, results-oriented, and concise (max 3 sentences, under 75 words).",
        "Avoid bullet points, bold text, markdown formatting, and generic introductions.",
        "Write in plain text only. Be direct and specific.",
        f'Summary: """{summary}"""',
    )


def experience_enhancement_prompt(
    experience: ExperienceEntry,
    job_description: Optional[str] = None,
    keywords: Optional[List[str]] = None,
) -> str:
    return _lines(
        "You are a resume writer helping adapt a candidate's experience to match a job posting.",
        "Rewrite the experience to emphasize the technologies and skills the job description asks for.",
        "Keep the company name, role title, and dates UNCHANGED.",
        f"\nJob Requirements/Description:\n{job_description}\n" if job_description else "",
        f"Priority keywords: {', '.join(keywords[:10])}" if keywords else "",
        "Current Experience Entry:",
        f"Company: {experience.company}",
        f"Role: {experience.role}",
        f"Current Highlights: {'; '.join(experience.highlights)}",
        "\nRules:",
        "- Return 3-5 bullet points, each under 25 words",
        "- Start each bullet with a strong action verb",
        "- Include specific technologies/skills from the job description naturally",
        "- Focus on measurable outcomes and impact",
        "- DO NOT use bold text, markdown formatting, asterisks, or any special formatting",
        "- Write in plain text only, no introductions or conclusions",
        "- Return ONLY the bullet points, one per line, no numbering or special characters",
    )


def keyword_extraction_prompt(job_description: str) -> str:
    return _lines(
        "Extract ALL technical skills, frameworks, programming languages, tools, and methodologies from this job description.",
        "Include both hard technical skills (e.g., React, Python, AWS) and soft skills (e.g., leadership, agile).",
        "Return them as a comma-separated list of keywords without any numbering, commentary, or extra text.",
        f"Job description:\n{job_description}",
    )


def summary_adaptation_prompt(summary: str, keywords: List[str]) -> str:
    return _lines(
        "Rewrite this professional summary so the candidate clearly fits a job requiring these skills:",
        ", ".join(keywords[:8]),
        "\nCurrent summary:",
        summary,
        "\nMake it confident, results-oriented, and clearly demonstrate experience with the required technologies.",
        "Keep it under 80 words and 3 sentences maximum.",
        "DO NOT use bullet points, bold text, markdown formatting, asterisks, or generic introductions.",
        "Write in plain text only. Be direct and specific about accomplishments.",
    )


def cv_import_prompt(resume_text: str) -> str:
    return "\n".join([
        "You are an expert resume parser. Extract ALL available information from the resume below.",
        "",
        "OUTPUT FORMAT: Return ONLY a valid JSON object with this exact structure:",
        json.dumps(CV_IMPORT_EXAMPLE, indent=2),
        "",
        "EXTRACTION RULES:",
        "1. Extract the person's real name from the resume -> use for 'fullName' (never use placeholder)",
        "2. Extract the person's real email -> use for 'email' (must be valid email format)",
        "3. Extract job title/role -> use for 'title'",
        "4. Extract professional summary/objective -> use for 'summary'",
        "5. Extract ALL job positions with their descriptions -> add to 'experience' array",
        "6. Extract ALL education entries -> add to 'education' array",
        "7. Extract ALL projects -> add to 'projects' array",
        "8. Extract ALL technical skills -> add to 'skills' array",
        "9. Extract certifications if present -> add to 'certifications' array",
        "10. Extract languages if present -> add to 'languages' array",
        "",
        "IMPORTANT:",
        "- Return ONLY the JSON object, no markdown fences, no explanations",
        '- Use empty string "" for missing text fields (never null)',
        "- Use empty array [] for missing list fields (never null)",
        "- Preserve all bullet points from work experience as separate items in highlights array",
        "- Keep dates in simple format: 'Jan 2023', '2020', or 'Present'",
        "",
        "RESUME TO PARSE:",
        "---",
        resume_text,
        "---",
    ])


def ats_optimization_prompt(cv: CVDocument) -> str:
    return "\n".join([
        "You are an expert ATS (Applicant Tracking System) optimization specialist.",
        "Optimize the entire CV to be ATS-friendly while keeping it professional and impactful.",
        "",
        "ATS Optimization Rules:",
        "1. Include relevant keywords and industry-standard terminology",
        "2. Start bullet points with action verbs (Led, Developed, Implemented, Managed, etc.)",
        "3. Quantify achievements with numbers, percentages, and metrics whenever possible",
        "4. Remove special characters and complex formatting",
        "5. Use standard job titles and clear role descriptions",
        "6. Ensure consistency in date formats and structure",
        "7. Optimize for keyword matching without keyword stuffing",
        "",
        "Current CV Data:",
        json.dumps(cv.to_dict(), indent=2, ensure_ascii=False),
        "",
        "IMPORTANT OUTPUT REQUIREMENTS:",
        "- Return ONLY a valid JSON object with exactly the same structure as the input",
        '- Use empty string "" for missing text fields (NEVER use null)',
        "- Use empty array [] for missing list fields (NEVER use null)",
        "- Keep all IDs unchanged",
        '- Ensure all date fields are strings (use "" if no date available)',
    ])


def motivation_letter_prompt(cv: CVDocument, job_position: str, language: str = "en") -> str:
    p = cv.personal
    if language == "fr":
        language_instruction = "Generate the letter in FRENCH. Use formal French business language."
    else:
        language_instruction = "Generate the letter in ENGLISH."

    experience = "\n".join(
        f"- {e.role} at {e.company}" + (f": {e.highlights[0]}" if e.highlights else "")
        for e in cv.experience[:3]
    )
    education = "\n".join(f"- {e.degree} from {e.school}" for e in cv.education[:2])

    return f"""Generate a professional motivation letter for the following job application.

IMPORTANT: {language_instruction}

Applicant Information:
- Name: {p.full_name}
- Title: {p.title}
- Summary: {p.summary}
- Email: {p.email}
- Location: {p.location}

Job Position/Description:
{job_position}

Key Experience:
{experience}

Education:
{education}

Key Skills:
{', '.join(cv.skills[:8])}

Requirements:
1. Write a compelling motivation letter (250-400 words)
2. Highlight relevant experience and skills that match the job requirements
3. Maintain a professional yet personable tone
4. Include proper letter structure (greeting, body paragraphs, closing)
5. Avoid clichés and generic statements

Generate ONLY the letter content without any markdown formatting, headers, or explanations. Start directly with the letter."""


def internship_subjects_prompt(internship_text: str, cv: CVDocument) -> str:
    return "\n".join([
        "You are a career advisor analyzing an internship opportunity for a candidate.",
        "",
        "INTERNSHIP DOCUMENT:",
        "```",
        internship_text,
        "```",
        "",
        "CANDIDATE CV:",
        "```",
        _candidate_profile(cv),
        "```",
        "",
        "Suggest the internship subjects that match the candidate's profile and extract the company contact email if present.",
        "",
        "Generate a JSON object with:",
        "- subjects: 1-4 suggestions, each with a concise 'subject' (max 15 words) and an 'explanation' (2-3 sentences referencing the CV)",
        "- companyEmail: the contact email address found in the document (or null if not found)",
        "- companyName: the company name from the document (or null if not found)",
        "",
        "Return ONLY a valid JSON object with this exact structure:",
        INTERNSHIP_SUBJECTS_EXAMPLE,
        "",
        "Rules:",
        "- Order subjects from most relevant to least relevant",
        "- Extract the EXACT email address as it appears in the document",
        "- Return ONLY the JSON object, no other text or markdown",
    ])


def internship_emails_prompt(internship_text: str, cv: CVDocument, selected_subject: str) -> str:
    return "\n".join([
        "You are a professional email writer helping a candidate apply for an internship.",
        "",
        "INTERNSHIP DOCUMENT:",
        "```",
        internship_text,
        "```",
        "",
        "CANDIDATE CV:",
        "```",
        _candidate_profile(cv, with_contact=True),
        "```",
        "",
        f"SELECTED INTERNSHIP SUBJECT: {selected_subject}",
        "",
        "Generate TWO professional emails in JSON format:",
        "1. applicantEmail: the application the candidate sends (200-300 words, 'Subject: ...' first, contact details in the signature)",
        "2. companyEmail: a formal company correspondence template (150-250 words, 'Subject: ...' first)",
        "",
        "Return ONLY a valid JSON object with this exact structure:",
        INTERNSHIP_EMAILS_EXAMPLE,
        "",
        "DO NOT include markdown formatting, code blocks, or explanatory text. Return ONLY the JSON object.",
    ])
