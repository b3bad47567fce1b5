from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import mapped_column, relationship

from tripjournal.models.db import Base


class User(Base):
    __tablename__ = "users"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Subject id issued by the identity provider; other tables join on `id`
    auth_uid = mapped_column(String(128), unique=True, nullable=False, index=True)
    email = mapped_column(String(255), nullable=True)
    display_name = mapped_column(String(255), nullable=True)
    profile_image_url = mapped_column(String, nullable=True)
    is_public = mapped_column(Boolean, default=False, nullable=False)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    trips = relationship("Trip", back_populates="owner", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", passive_deletes=True)
