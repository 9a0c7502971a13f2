#Description: ORM entity definitions.

from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import String, DateTime, JSON
from datetime import datetime

Base = declarative_base()

class SignalNode(Base):
    """One leaf of the signal tree, addressed by its slash separated path."""
    __tablename__ = "signal_nodes"
    path: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[object] = mapped_column(JSON)
    ts_updated: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
