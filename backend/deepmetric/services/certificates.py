"""
Certificate issuance for Deepmetric.

Builds the renderable credential view for a completed course. Layout and
PDF export belong to the front-end.
"""

from datetime import date
from typing import Optional
import logging

from deepmetric.core.config import settings
from deepmetric.core.security import create_certificate_token, verify_certificate_token
from deepmetric.schemas.certificate import CertificateView, CredentialVerification
from deepmetric.services.directory import EnrollmentService
from deepmetric.services.enrollment import compose_letter


logger = logging.getLogger(__name__)


def format_issue_date(day: date) -> str:
    """Format a date the way it is printed on certificates, e.g. "17 October 2026"."""
    return f"{day.day} {day.strftime('%B %Y')}"


def issue_certificate(
    service: EnrollmentService,
    course_id: str,
    today: Optional[date] = None
) -> Optional[CertificateView]:
    """
    Build the certificate for one of the signed-in user's completed courses.

    A "Certificate Generated" email is simulated each time.

    Args:
        service: Enrollment service for the current request
        course_id: The completed course
        today: Issue date, defaults to today

    Returns:
        Optional[CertificateView]: The certificate, or None if the course is
        unknown or not completed

    Raises:
        SessionRequired: If nobody is signed in
    """
    user = service.require_user()
    course = service.catalog.get_course(course_id)
    if course is None or not user.is_completed(course_id):
        return None

    issued_on = today or date.today()
    view = CertificateView(
        user_name=user.name,
        course_id=course.id,
        course_title=course.title,
        instructor=course.instructor,
        issue_date=format_issue_date(issued_on),
        credential_id=create_certificate_token(user.id, course.id, issued_on.isoformat())
    )

    service.notifier.send_email(
        user.email,
        "Certificate Generated",
        compose_letter(
            user.name,
            f'Your certificate for "{course.title}" has been generated and is ready for download.'
        )
    )
    logger.info(f"Certificate issued: user {user.id}, course {course.id}")
    return view


def verify_credential(credential_id: str) -> CredentialVerification:
    """Check a credential id printed on a certificate."""
    claims = verify_certificate_token(credential_id)
    if claims is None:
        return CredentialVerification(valid=False)

    return CredentialVerification(
        valid=True,
        user_id=claims.get("sub"),
        course_id=claims.get("course_id"),
        issued_on=claims.get("issued_on"),
        issuer=claims.get("iss", settings.CERTIFICATE_ISSUER)
    )
