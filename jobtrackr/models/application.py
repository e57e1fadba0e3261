import enum
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from jobtrackr.core.database import Base


class ContractType(str, enum.Enum):
    """Contract types offered by the application form."""
    CDI = "CDI"
    CDD = "CDD"
    STAGE = "Stage"
    ALTERNANCE = "Alternance"
    FREELANCE = "Freelance"


class ApplicationStatus(str, enum.Enum):
    """
    Status labels offered by the UI.

    The status column itself is free text: nothing on the server restricts
    or sequences transitions between these values.
    """
    TODO = "À faire"
    SENT = "Envoyé"
    FOLLOWED_UP = "Relancé"
    INTERVIEW = "Entretien"
    ACCEPTED = "Accepté"
    REJECTED = "Refusé"


class Application(Base):
    """
    A job application tracked by its owner.

    Tags are stored as a single comma-joined string. A tag that itself
    contains a comma is split in two when read back.
    """
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    company = Column(String, nullable=False)
    position = Column(String, nullable=False)
    contract = Column(String, nullable=False, default=ContractType.CDI.value)
    status = Column(String, nullable=False, default=ApplicationStatus.TODO.value)
    link = Column(String, nullable=True)

    # Contact
    contact_name = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)

    tags = Column(String, nullable=False, default="")
    notes = Column(Text, nullable=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="applications")

    def __repr__(self):
        return f"<Application(id={self.id}, company='{self.company}', status='{self.status}')>"
