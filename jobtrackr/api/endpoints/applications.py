"""
Job application endpoints.

Every route requires a session and only ever touches rows owned by the
signed-in user. Rows owned by someone else answer 404, like missing ones.
"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from jobtrackr.core.database import get_db
from jobtrackr.core.deps import get_current_user
from jobtrackr.crud import application as application_crud
from jobtrackr.models.user import User
from jobtrackr.schemas.application import ApplicationPayload, ApplicationResponse, MessageResponse

router = APIRouter(prefix="/applications", tags=["Applications"])
logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Application not found"


@router.get("", response_model=List[ApplicationResponse])
def list_applications(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the current user's applications, most recently applied first.
    """
    try:
        return application_crud.list_for_user(db, user.id)
    except Exception:
        logger.exception(f"Error listing applications for user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )


@router.post("", status_code=201, response_model=ApplicationResponse)
def create_application(
    request: ApplicationPayload,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create an application owned by the current user.

    Tags are sent as a list and stored comma-joined.
    """
    try:
        application = application_crud.create(db, user.id, request)
    except Exception:
        db.rollback()
        logger.exception(f"Error creating application for user {user.id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create application"
        )

    logger.info(f"Created application {application.id} for user {user.id}: {application.company}")
    return application


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Retrieve one of the current user's applications by ID."""
    try:
        application = application_crud.get_owned(db, application_id, user.id)
    except Exception:
        logger.exception(f"Error fetching application {application_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error"
        )

    if not application:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

    return application


@router.put("/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: str,
    request: ApplicationPayload,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Replace every field of one of the current user's applications.

    Omitted optional fields are cleared; this is not a partial update.
    """
    try:
        application = application_crud.update_owned(db, application_id, user.id, request)
    except Exception:
        db.rollback()
        logger.exception(f"Error updating application {application_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update application"
        )

    if not application:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

    logger.info(f"Updated application {application_id} for user {user.id}")
    return application


@router.delete("/{application_id}", response_model=MessageResponse)
def delete_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one of the current user's applications."""
    try:
        deleted = application_crud.delete_owned(db, application_id, user.id)
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting application {application_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete application"
        )

    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

    logger.info(f"Deleted application {application_id} for user {user.id}")
    return MessageResponse(message="Application deleted")
