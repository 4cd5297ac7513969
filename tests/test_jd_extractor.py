import pytest

from skillsync.jd_parser.jd_extractor import extract_company_name, extract_job_role


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Job Title: Backend Developer\nWe build APIs.", "Backend Developer"),
        ("About us\nPosition:  Data Analyst  \n", "Data Analyst"),
        ("Role:\nSomething", "Unknown"),
        ("We are hiring a Senior Engineer to join us.", "Senior Engineer"),
        ("Looking for a frontend designer with taste.", "frontend designer"),
        ("Great place to work.", "Software Engineer"),
        ("", "Software Engineer"),
    ],
)
def test_extract_job_role(text, expected):
    assert extract_job_role(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Company: Acme Corp\nRole: Dev", "Acme Corp"),
        ("ORGANIZATION: Globex", "Globex"),
        ("Employer:   ", "Unknown"),
        ("No label here", "Unknown"),
        ("", "Unknown"),
    ],
)
def test_extract_company_name(text, expected):
    assert extract_company_name(text) == expected
