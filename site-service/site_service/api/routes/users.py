"""
User routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
import logging

from ...application.services import RegistrationService
from ...dependencies import get_registration_service
from ...schemas import RegisterRequest, RegistrationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("/signup", response_model=RegistrationResult)
async def signup(
    form: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Create an account on the content backend

    Backend failures are never raised: the response carries one message
    suitable for display next to the form, with the backend's status mirrored.
    """
    try:
        result = await service.register(form)
    except Exception as e:
        logger.error(f"Error signing up {form.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create account"
        )
    return JSONResponse(status_code=result.status_code, content=result.model_dump())
