"""Database models."""

# Import models in dependency order so relationships resolve
from app.models.user import User
from app.models.job import Job

# Export all models
__all__ = [
    "User",
    "Job",
]
