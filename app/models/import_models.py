"""
Import session models.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class ImportSession(SQLModel, table=True):
    """One batch upload spanning several spreadsheet files."""

    __tablename__ = "import_sessions"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    total_files: int = Field(default=0)
    processed_files: int = Field(default=0)
    status: str = Field(max_length=20, default="active")  # active, completed, failed
    total_imported: int = Field(default=0)
    created_by: Optional[str] = Field(default=None, max_length=100, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = Field(default=None)

    # Relationships
    files: List["ImportSessionFile"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={"order_by": "ImportSessionFile.position"},
    )


class ImportSessionFile(SQLModel, table=True):
    """Outcome of one file within an import session."""

    __tablename__ = "import_session_files"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(foreign_key="import_sessions.id", index=True)
    position: int = Field(default=0)  # order within the batch
    file_name: str = Field(max_length=255)
    total_rows: int = Field(default=0)
    valid_rows: int = Field(default=0)
    imported_rows: int = Field(default=0)
    status: str = Field(max_length=20, default="success")  # success, error
    error_message: Optional[str] = Field(default=None, max_length=2000)
    preview_json: str = Field(default="[]", max_length=10000)
    duration_seconds: float = Field(default=0.0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    session: ImportSession = Relationship(back_populates="files")


class ImportErrorLog(SQLModel, table=True):
    """Row-level import failure."""

    __tablename__ = "import_errors"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(foreign_key="import_sessions.id", index=True)
    file_name: str = Field(max_length=255)
    row_number: int = Field()
    error_type: str = Field(max_length=50)  # persistence, parsing
    error_message: str = Field(max_length=2000)
    cell_value: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
