from sqlalchemy import Boolean, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rinkforms.db.session import Base
from rinkforms.models.common import TimestampMixin, UUIDMixin


class FormConfiguration(Base, UUIDMixin, TimestampMixin):
    """One custom field of the active form for a (facility, form type) binding."""

    __tablename__ = "form_configurations"
    __table_args__ = (
        Index("ix_form_configurations_facility_form", "facility_id", "form_type"),
    )

    facility_id: Mapped[str] = mapped_column(String(80), nullable=False)
    form_type: Mapped[str] = mapped_column(String(80), nullable=False)
    field_name: Mapped[str] = mapped_column(String(120), nullable=False)
    field_label: Mapped[str] = mapped_column(String(200), nullable=False)
    field_type: Mapped[str] = mapped_column(String(30), nullable=False)
    field_options: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    placeholder_text: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    help_text: Mapped[str] = mapped_column(Text, default="", nullable=False)
    field_width: Mapped[str] = mapped_column(String(10), default="full", nullable=False)
    default_value: Mapped[str] = mapped_column(Text, default="", nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
