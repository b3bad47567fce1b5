from datetime import UTC, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import mapped_column, relationship

from tripjournal.models.db import Base


class Trip(Base):
    __tablename__ = "trips"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = mapped_column(String(255), nullable=False)
    destination = mapped_column(String(255), nullable=False)
    country = mapped_column(String(255), nullable=True)
    latitude = mapped_column(Float, nullable=True)
    longitude = mapped_column(Float, nullable=True)
    start_date = mapped_column(Date, nullable=True)
    end_date = mapped_column(Date, nullable=True)
    description = mapped_column(Text, nullable=True)
    notes = mapped_column(Text, nullable=True)
    tags = mapped_column(ARRAY(String), default=list, nullable=False)
    # Legacy flat list of image URLs, kept next to the gallery table
    images = mapped_column(ARRAY(String), default=list, nullable=False)
    is_public = mapped_column(Boolean, default=False, nullable=False)
    cover_image = mapped_column(String, nullable=True)
    cover_image_path = mapped_column(String, nullable=True)
    likes_count = mapped_column(Integer, default=0, nullable=False)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    owner = relationship("User", back_populates="trips")
    gallery_images = relationship(
        "GalleryImage",
        back_populates="trip",
        cascade="all",
        passive_deletes=True,
        order_by=lambda: [GalleryImage.order_index, GalleryImage.uploaded_at, GalleryImage.id],
    )
    comments = relationship("Comment", back_populates="trip", cascade="all", passive_deletes=True)


class GalleryImage(Base):
    __tablename__ = "trip_gallery_images"

    id = mapped_column(Integer, primary_key=True, autoincrement=True)
    trip_id = mapped_column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    url = mapped_column(String, nullable=False)
    # Storage object path, opaque to the API
    path = mapped_column(String, nullable=False)
    filename = mapped_column(String(255), nullable=False)
    original_name = mapped_column(String(255), nullable=True)
    order_index = mapped_column(Integer, default=0, nullable=False)
    uploaded_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    trip = relationship(Trip, back_populates="gallery_images")
