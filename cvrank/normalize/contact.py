"""
Contact detail heuristics.

Pulls a display name, e-mail address, phone number and LinkedIn
profile out of résumé text so the ranked list can show who each
candidate is.  These fields are informational only and never influence
a score.  When no line looks like a name, the display name is derived
from the uploaded file name with words such as "resume" or "cv" removed.
"""

from __future__ import annotations

import os
import re
from typing import Optional

from .schema import ContactInfo

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.I)
PHONE_RE = re.compile(r"\+?\(?\d[\d\s().-]{7,}\d")
LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+/?", re.I)
NAME_LINE_RE = re.compile(r"^[A-Z][A-Za-z'’-]+(?:\s+[A-Z][A-Za-z'’.-]*){1,3}$")
FILENAME_NOISE_RE = re.compile(r"\b(resume|résumé|cv|curriculum|vitae|final|updated)\b", re.I)

# Only the top of the document is searched for the name.
NAME_SEARCH_LINES = 5


def _extract_phone(text: str) -> Optional[str]:
    for m in PHONE_RE.finditer(text):
        candidate = m.group(0).strip()
        digits = re.sub(r"\D", "", candidate)
        if 10 <= len(digits) <= 15:
            return candidate
    return None


def _extract_name(text: str) -> str:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines[:NAME_SEARCH_LINES]:
        if NAME_LINE_RE.match(line):
            return line
    return ""


def name_from_filename(filename: str) -> str:
    """Turn ``jane_doe-resume.pdf`` into ``Jane Doe``."""
    stem = os.path.splitext(os.path.basename(filename))[0]
    stem = re.sub(r"[-_.]+", " ", stem)
    stem = FILENAME_NOISE_RE.sub(" ", stem)
    return " ".join(word.capitalize() for word in stem.split())


def extract_contact(text: str, source_filename: str = "") -> ContactInfo:
    """Extract a display name, e-mail, phone number and LinkedIn URL."""
    email_match = EMAIL_RE.search(text)
    name = _extract_name(text) or name_from_filename(source_filename)
    linkedin_match = LINKEDIN_RE.search(text)
    return ContactInfo(
        name=name,
        email=email_match.group(0) if email_match else None,
        phone=_extract_phone(text),
        linkedin=linkedin_match.group(0).rstrip("/") if linkedin_match else None,
    )
