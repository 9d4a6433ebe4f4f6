import uuid

from sqlalchemy import Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from rinkforms.db.session import Base
from rinkforms.models.common import TimestampMixin, UUIDMixin


class FormTemplateVersion(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "form_template_versions"
    __table_args__ = (
        UniqueConstraint("subject_key", "version", name="uq_form_template_versions_subject_version"),
    )

    subject_key: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    template_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    facility_id: Mapped[str | None] = mapped_column(String(80), nullable=True)
    form_type: Mapped[str] = mapped_column(String(80), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    configuration: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    changed_by: Mapped[str] = mapped_column(String(200), nullable=False)
    changelog: Mapped[str | None] = mapped_column(Text, nullable=True)
