from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rinkforms.db.session import Base
from rinkforms.models.common import TimestampMixin, UUIDMixin


class FormConfigurationHead(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "form_configuration_heads"
    __table_args__ = (
        UniqueConstraint("facility_id", "form_type", name="uq_form_configuration_heads_facility_form"),
    )

    facility_id: Mapped[str] = mapped_column(String(80), nullable=False)
    form_type: Mapped[str] = mapped_column(String(80), nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
