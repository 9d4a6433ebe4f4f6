from sqlalchemy import Boolean, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rinkforms.db.session import Base
from rinkforms.models.common import TimestampMixin, UUIDMixin


class FormTemplate(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "form_templates"

    template_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    form_type: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(80), nullable=True)
    # The whole field list lives in one document so a save never leaves
    # a template with partially written fields.
    configuration: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_system_template: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
