"""
User database model.

A user row holds the account credentials and the ordered list of tracked
cities as an embedded JSON array, so every tracked-city change is a
single-row write.
"""

from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.sql import func

from weather_tracker.database import Base


class User(Base):
    """
    Registered user with an embedded tracked-city list.

    ``tracked_cities`` items are ``{"id", "name", "lat", "lon", "added_at"}``
    dicts in insertion order. The list must be reassigned, never mutated in
    place, for the change to be persisted.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(254), unique=True, index=True, nullable=False)
    username = Column(String(30), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    tracked_cities = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Optimistic concurrency: UPDATEs match on the version they read
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, cities={len(self.tracked_cities or [])})>"
