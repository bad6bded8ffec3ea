"""
Certificates router for Deepmetric.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from deepmetric.schemas.certificate import CertificateView, CredentialVerification
from deepmetric.services.certificates import issue_certificate, verify_credential
from deepmetric.services.directory import EnrollmentService
from deepmetric.routers.auth import get_enrollment


router = APIRouter()


@router.get("/verify/{credential_id}", response_model=CredentialVerification)
async def verify_certificate(credential_id: str) -> CredentialVerification:
    """
    Check a credential id printed on a certificate.
    """
    return verify_credential(credential_id)


@router.get("/{course_id}", response_model=CertificateView)
async def get_certificate(
    course_id: str,
    service: EnrollmentService = Depends(get_enrollment)
) -> CertificateView:
    """
    Get the certificate for a completed course.
    """
    certificate = issue_certificate(service, course_id)
    if certificate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No certificate available for this course"
        )
    return certificate
