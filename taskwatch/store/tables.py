"""SQLAlchemy mappings for the job runner's tables.

Read-only: the schema is owned by the job runner. Boolean-like columns
store ``2`` for true.
"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

FLAG_TRUE = 2


class ScheduledTaskRow(Base):
    """A scheduled background job."""
    __tablename__ = "ScheduledTask"

    rowid = Column("ROWID", Integer, primary_key=True)
    task_code = Column("taskCode", Integer, nullable=False, index=True)
    description = Column("description", String(255), nullable=True)
    is_active = Column("isActive", Integer, nullable=False, default=FLAG_TRUE)
    monday = Column("monday", Integer, nullable=True)
    tuesday = Column("tuesday", Integer, nullable=True)
    wednesday = Column("wednesday", Integer, nullable=True)
    thursday = Column("thursday", Integer, nullable=True)
    friday = Column("friday", Integer, nullable=True)
    saturday = Column("saturday", Integer, nullable=True)
    sunday = Column("sunday", Integer, nullable=True)
    frequency = Column("frequency", Integer, nullable=True)  # minutes
    email_recipients = Column("emailRecipients", Text, nullable=True)


class TaskExecutionLogRow(Base):
    """One execution-log row; ``endDate`` is the scheduled time for WAITING rows."""
    __tablename__ = "TaskExecutionLog"

    rowid = Column("ROWID", Integer, primary_key=True)
    task_code = Column("taskCode", Integer, nullable=False, index=True)
    status = Column("status", Integer, nullable=False)
    end_date = Column("endDate", DateTime, nullable=True)
    user_message = Column("userMessage", Text, nullable=True)
