"""Job application model."""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, false
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.utils.constants import DEFAULT_JOB_STATUS


class Job(Base):
    """A job application tracked by a user."""

    __tablename__ = "jobs"

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company = Column(String(255), nullable=False)
    role = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default=DEFAULT_JOB_STATUS)  # Applied, Interview, Offer, Rejected, ...

    deadline = Column(Date, nullable=True, index=True)
    applied_through = Column(String(255), nullable=True)  # LinkedIn, referral, company site, ...
    interview_date = Column(Date, nullable=True)

    # Set once, after a deadline reminder email was delivered
    reminder_sent = Column(Boolean, nullable=False, default=False, server_default=false())

    # Relationships
    user = relationship("User", back_populates="jobs")

    def __repr__(self):
        return f"<Job {self.role} at {self.company} ({self.status})>"
