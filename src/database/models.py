"""SQLAlchemy model for persisted cron tasks."""

from typing import Any, Dict

from sqlalchemy import JSON, Column, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TaskRecord(Base):
    __tablename__ = "cron_tasks"

    # Namespaced key: prefix + task id
    key = Column(String(300), primary_key=True)
    task_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="pending")

    # {"expression": "*/5 * * * *", "timezone": "UTC", "max_retries": 3, ...}
    options = Column(JSON, nullable=False)

    # {"run_count": 0, "last_run": "2024-01-01T10:00:00+00:00", ...}
    # Timestamps are kept as ISO-8601 text, see models.task.task_to_dict
    task_metadata = Column(JSON, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.task_id,
            "name": self.name,
            "status": self.status,
            "options": self.options,
            "metadata": self.task_metadata,
        }
