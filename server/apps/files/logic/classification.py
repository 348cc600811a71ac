"""Derive a document category from the form field it was uploaded under."""

from typing import Final

from server.apps.files.choices import FileCategory

# Ordered: the first keyword found in the field name wins.
CATEGORY_KEYWORDS: Final[tuple[tuple[str, FileCategory], ...]] = (
    ('resume', FileCategory.RESUME),
    ('cv', FileCategory.RESUME),
    ('certificate', FileCategory.EDUCATION_CERTIFICATE),
    ('education', FileCategory.EDUCATION_CERTIFICATE),
    ('experience', FileCategory.EXPERIENCE_LETTER),
    ('relieving', FileCategory.RELIEVING_LETTER),
    ('payslip', FileCategory.PAYSLIP),
    ('salary', FileCategory.PAYSLIP),
    ('bank', FileCategory.BANK_STATEMENT),
    ('offer', FileCategory.OFFER_LETTER),
    ('aadhaar', FileCategory.KYC_DOCUMENT),
    ('pan', FileCategory.KYC_DOCUMENT),
    ('passport', FileCategory.KYC_DOCUMENT),
    ('photo', FileCategory.PHOTO),
    ('agreement', FileCategory.AGREEMENT),
    ('policy', FileCategory.POLICY_DOCUMENT),
)


def determine_category(field_name: str) -> FileCategory:
    """Classify an upload by its form field name.

    Matching is a case-insensitive substring test.

    >>> determine_category('certificate_2')
    <FileCategory.EDUCATION_CERTIFICATE: 'education_certificate'>

    Args:
        field_name: Multipart field name (e.g., 'resumeFile').

    Returns:
        Matching category, ``other`` when no keyword matches.
    """
    lowered = field_name.lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in lowered:
            return category
    return FileCategory.OTHER
