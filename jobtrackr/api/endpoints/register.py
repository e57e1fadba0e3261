"""
Registration endpoint for the credentials path.
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from jobtrackr.core.database import get_db
from jobtrackr.schemas.user import RegisterRequest, RegisterResponse
from jobtrackr.services import auth_service

router = APIRouter(tags=["Authentication"])
logger = logging.getLogger(__name__)


@router.post("/register", status_code=201, response_model=RegisterResponse)
def register(
    request: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new user account with email and password.

    The password is stored as a bcrypt hash. Sign in afterwards through
    /auth/login to get a session.
    """
    try:
        auth_service.register(db, email=request.email, password=request.password, name=request.name)
    except auth_service.EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )
    except Exception:
        db.rollback()
        logger.exception(f"Error registering {request.email}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    return RegisterResponse(success=True)
