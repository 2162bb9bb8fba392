"""SQLAlchemy ORM model for the user_access_keys table.

Keys are stored lower-cased so that lookups match case-insensitively
against the normalized key.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class AccessKeyModel(Base, TimestampMixin):
    """ORM model for user_access_keys table.

    Notes:
    - access_key is unique and indexed for authentication lookup
    - rows are never deleted by the resolution layer; revocation sets
      is_active to false
    - deleting a user cascades to their keys
    """

    __tablename__ = "user_access_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    access_key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    key_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<AccessKeyModel(id={self.id}, user_id={self.user_id}, "
            f"key_name={self.key_name}, is_active={self.is_active})>"
        )
