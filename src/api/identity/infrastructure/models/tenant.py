"""SQLAlchemy ORM model for the tenants table."""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table.

    Notes:
    - id is a free-form string (e.g. ``tenant-1a2b3c4d``) and globally unique
    - slug is used for theme-scoped URL routing only
    - theme_id names the theme the tenant is bound to; several tenants
      may share a theme
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    theme_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (Index("ix_tenants_theme_id_created_at", "theme_id", "created_at"),)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, name={self.name}, theme_id={self.theme_id})>"
