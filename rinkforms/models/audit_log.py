from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column
from rinkforms.db.session import Base
from rinkforms.models.common import UUIDMixin, TimestampMixin

class AuditLog(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "audit_log"
    actor: Mapped[str] = mapped_column(String(200), nullable=False)
    entity: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(200), nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False)
    diff: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
