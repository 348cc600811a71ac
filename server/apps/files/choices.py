"""Closed enumerations used by file records."""

from django.db import models


class FileCategory(models.TextChoices):
    """Kind of document an upload represents."""

    RESUME = 'resume', 'Resume'
    EDUCATION_CERTIFICATE = 'education_certificate', 'Education certificate'
    EXPERIENCE_LETTER = 'experience_letter', 'Experience letter'
    RELIEVING_LETTER = 'relieving_letter', 'Relieving letter'
    PAYSLIP = 'payslip', 'Payslip'
    BANK_STATEMENT = 'bank_statement', 'Bank statement'
    OFFER_LETTER = 'offer_letter', 'Offer letter'
    KYC_DOCUMENT = 'kyc_document', 'KYC document'
    PHOTO = 'photo', 'Photo'
    AGREEMENT = 'agreement', 'Agreement'
    POLICY_DOCUMENT = 'policy_document', 'Policy document'
    OTHER = 'other', 'Other'


class AccessLevel(models.TextChoices):
    """Who may read a file beyond its uploader and admins."""

    PUBLIC = 'public', 'Public'
    INTERNAL = 'internal', 'Internal'
    CONFIDENTIAL = 'confidential', 'Confidential'
    RESTRICTED = 'restricted', 'Restricted'


class ScanStatus(models.TextChoices):
    """Virus scan outcome."""

    PENDING = 'pending', 'Pending'
    CLEAN = 'clean', 'Clean'
    INFECTED = 'infected', 'Infected'
    ERROR = 'error', 'Error'


class EntityType(models.TextChoices):
    """Kinds of records a file can belong to."""

    CANDIDATE = 'Candidate'
    CLIENT = 'Client'
    REQUIREMENT = 'Requirement'
    BGV_VENDOR = 'BGVVendor'
    AGENCY = 'Agency'
    USER = 'User'


class VerificationDecision(models.TextChoices):
    """Reviewer decision on a document."""

    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'
