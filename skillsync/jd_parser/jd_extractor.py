"""Job description field extraction: target role and company name."""
import re
from typing import Optional

ROLE_LABELS = ("job title:", "position:", "role:")
COMPANY_LABELS = ("company:", "organization:", "employer:")
COMMON_TITLES = ("developer", "engineer", "analyst", "designer", "manager", "architect")

DEFAULT_ROLE = "Software Engineer"
DEFAULT_COMPANY = "Unknown"


def _labelled_value(jd_text: str, labels) -> Optional[str]:
    """Return the text after the first ':' of the first line carrying one of ``labels``.

    A labelled line with nothing after the colon yields "Unknown".
    """
    for line in jd_text.split("\n"):
        low = line.lower()
        if any(label in low for label in labels):
            parts = line.split(":")
            value = parts[1].strip() if len(parts) > 1 else ""
            return value or "Unknown"
    return None


def extract_job_role(jd_text: str) -> str:
    if not jd_text:
        return DEFAULT_ROLE

    labelled = _labelled_value(jd_text, ROLE_LABELS)
    if labelled:
        return labelled

    low = jd_text.lower()
    for title in COMMON_TITLES:
        if title in low:
            m = re.search(rf"\w+\s+{title}", jd_text, re.IGNORECASE)
            if m:
                return m.group(0)
    return DEFAULT_ROLE


def extract_company_name(jd_text: str) -> str:
    if not jd_text:
        return DEFAULT_COMPANY
    return _labelled_value(jd_text, COMPANY_LABELS) or DEFAULT_COMPANY
