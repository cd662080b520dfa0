"""
SQLAlchemy ORM models for the SamanaInn catalog and chat history.

Catalog tables (read-only from the chatbot's point of view):
- locations: Places of the Samaná peninsula with descriptive content
- hotels: Lodging offers (hotel, apartment, villa)
- restaurant_categories / restaurants: Dining offers grouped by cuisine
- tour_categories / tours: Excursions and transfers
- cars: Vehicle rental offers (car, motorcycle, atv)
- news_articles: Blog posts used for information queries

Conversation tables (written by the SQL conversation store):
- conversations: One row per conversation with its JSONB context
- conversation_messages: Chronological user/assistant turns

Catalog rows use integer ids (ordering "newest first" is id DESC) and are
only visible to the chatbot when status == "publish".
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    ARRAY,
    TIMESTAMP,
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy import (
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# ============================================================================
# Base Class
# ============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ============================================================================
# Enums
# ============================================================================


class PublishStatus(str, PyEnum):
    """Publication status of a catalog row."""

    PUBLISH = "publish"
    DRAFT = "draft"


class AccommodationType(str, PyEnum):
    """Lodging subtype."""

    HOTEL = "hotel"
    APARTMENT = "apartment"
    VILLA = "villa"


class MessageRole(str, PyEnum):
    """Role of message sender in conversation history."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


# ============================================================================
# Catalog Models
# ============================================================================


class CatalogItemMixin:
    """Columns shared by every listable catalog table."""

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    short_desc: Mapped[str | None] = mapped_column(Text, nullable=True)

    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    sale_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    review_score: Mapped[Decimal | None] = mapped_column(Numeric(3, 1), nullable=True)

    # Image URLs, first one is the cover
    gallery: Mapped[list[str]] = mapped_column(ARRAY(String), default=list, nullable=False)
    # Free labels: "pool", "family", "couple", "beach"...
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), default=list, nullable=False)

    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PublishStatus.PUBLISH.value, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class Location(Base):
    """
    Location model - Towns, beaches and landmarks of the peninsula.

    `content` holds the long description returned for information queries.
    """

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=PublishStatus.PUBLISH.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name='{self.name}')>"


class Hotel(CatalogItemMixin, Base):
    """Hotel model - Lodging offers of every subtype."""

    __tablename__ = "hotels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # AccommodationType value
    accommodation_type: Mapped[str] = mapped_column(
        String(20), default=AccommodationType.HOTEL.value, nullable=False, index=True
    )
    star_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True
    )

    location: Mapped[Optional["Location"]] = relationship("Location")

    __table_args__ = (
        Index("idx_hotels_status_featured", "status", "is_featured"),
    )

    def __repr__(self) -> str:
        return f"<Hotel(id={self.id}, title='{self.title}', type='{self.accommodation_type}')>"


class RestaurantCategory(Base):
    """Cuisine categories (local, seafood, italian...)."""

    __tablename__ = "restaurant_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Restaurant(CatalogItemMixin, Base):
    """Restaurant model - Dining offers."""

    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("restaurant_categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True
    )

    category: Mapped[Optional["RestaurantCategory"]] = relationship("RestaurantCategory")
    location: Mapped[Optional["Location"]] = relationship("Location")

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, title='{self.title}')>"


class TourCategory(Base):
    """Tour categories (whale, el_limon, los_haitises, transfer...)."""

    __tablename__ = "tour_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Tour(CatalogItemMixin, Base):
    """Tour model - Excursions, activities and airport transfers."""

    __tablename__ = "tours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    duration_hours: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), nullable=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("tour_categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True
    )

    category: Mapped[Optional["TourCategory"]] = relationship("TourCategory")
    location: Mapped[Optional["Location"]] = relationship("Location")

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, title='{self.title}')>"


class Car(CatalogItemMixin, Base):
    """Car model - Vehicle rental offers (price is per day)."""

    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_type: Mapped[str] = mapped_column(String(30), default="car", nullable=False)
    passengers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True
    )

    location: Mapped[Optional["Location"]] = relationship("Location")

    def __repr__(self) -> str:
        return f"<Car(id={self.id}, title='{self.title}', type='{self.vehicle_type}')>"


class NewsArticle(Base):
    """Blog posts about the destination."""

    __tablename__ = "news_articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=PublishStatus.PUBLISH.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<NewsArticle(id={self.id}, title='{self.title}')>"


# ============================================================================
# Conversation Models
# ============================================================================


class Conversation(Base):
    """
    Conversation model - One chat session and its routing context.

    `context` stores the ConversationContext JSON produced by merge_context.
    """

    __tablename__ = "conversations"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )
    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    context: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    messages: Mapped[list["ConversationMessage"]] = relationship(
        "ConversationMessage", back_populates="conversation", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, session_id='{self.session_id}')>"


class ConversationMessage(Base):
    """
    ConversationMessage model - One user or assistant turn.

    Metadata stores the ui directives and results of assistant turns.
    """

    __tablename__ = "conversation_messages"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid4
    )
    conversation_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[MessageRole] = mapped_column(
        SQLEnum(MessageRole, name="message_role", create_type=True),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_: Mapped[dict] = mapped_column(
        "metadata", JSONB, default=dict, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=datetime.utcnow, nullable=False
    )

    conversation: Mapped["Conversation"] = relationship(
        "Conversation", back_populates="messages"
    )

    __table_args__ = (
        Index("idx_conversation_messages_conversation_created", "conversation_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ConversationMessage(id={self.id}, conversation_id={self.conversation_id}, role='{self.role.value}')>"
