"""
CRUD operations for Application model.

Every by-id operation is scoped to the owning user: a row that belongs to
somebody else is indistinguishable from a missing one. Update and delete
are single statements filtered on both id and owner.
"""

from typing import List, Optional
from sqlalchemy import delete as sa_delete, update as sa_update
from sqlalchemy.orm import Session
from jobtrackr.models.application import Application
from jobtrackr.schemas.application import ApplicationPayload
from jobtrackr.services.tracker_view import join_tags


def _column_values(data: ApplicationPayload) -> dict:
    """Map a validated payload onto column values (full field set)."""
    return {
        "company": data.company,
        "position": data.position,
        "contract": data.contract,
        "status": data.status,
        "link": data.link,
        "contact_name": data.contact_name,
        "contact_email": data.contact_email,
        "contact_phone": data.contact_phone,
        "tags": join_tags(data.tags),
        "notes": data.notes,
        "applied_at": data.applied_at,
    }


def create(db: Session, user_id: str, data: ApplicationPayload) -> Application:
    """
    Create a new application owned by user_id.

    Args:
        db: Database session
        user_id: Owner id
        data: Validated application payload

    Returns:
        Created Application instance with id
    """
    db_application = Application(user_id=user_id, **_column_values(data))

    db.add(db_application)
    db.commit()
    db.refresh(db_application)

    return db_application


def get_owned(db: Session, application_id: str, user_id: str) -> Optional[Application]:
    """
    Retrieve an application by id if it belongs to user_id.

    Returns:
        Application instance if found and owned, None otherwise
    """
    return db.query(Application).filter(
        Application.id == application_id,
        Application.user_id == user_id
    ).first()


def list_for_user(db: Session, user_id: str) -> List[Application]:
    """All applications of a user, most recently applied first."""
    return (
        db.query(Application)
        .filter(Application.user_id == user_id)
        .order_by(Application.applied_at.desc())
        .all()
    )


def update_owned(
    db: Session,
    application_id: str,
    user_id: str,
    data: ApplicationPayload
) -> Optional[Application]:
    """
    Overwrite every field of an owned application.

    Returns:
        Updated Application instance, or None if no owned row matched
    """
    result = db.execute(
        sa_update(Application)
        .where(Application.id == application_id, Application.user_id == user_id)
        .values(**_column_values(data))
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        db.rollback()
        return None

    db.commit()
    return get_owned(db, application_id, user_id)


def delete_owned(db: Session, application_id: str, user_id: str) -> bool:
    """
    Delete an owned application.

    Returns:
        True if deleted, False if no owned row matched
    """
    result = db.execute(
        sa_delete(Application)
        .where(Application.id == application_id, Application.user_id == user_id)
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        db.rollback()
        return False

    db.commit()
    return True
