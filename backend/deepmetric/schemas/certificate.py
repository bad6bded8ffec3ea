"""
Certificate schemas for Deepmetric.
"""

from typing import Optional

from .base import CamelModel


class CertificateView(CamelModel):
    """Everything needed to render a certificate of completion."""
    user_name: str
    course_id: str
    course_title: str
    instructor: str
    issue_date: str
    credential_id: str


class CredentialVerification(CamelModel):
    valid: bool
    user_id: Optional[str] = None
    course_id: Optional[str] = None
    issued_on: Optional[str] = None
    issuer: Optional[str] = None
