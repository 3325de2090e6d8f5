"""
Import service for processing bulk spreadsheet uploads into hardware stores.
"""
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.models.hardware_store import HardwareStore
from app.models.import_models import ImportErrorLog, ImportSession, ImportSessionFile
from app.services.achievement_service import ImportPerformance, achievement_service, achievement_to_dict
from app.services.config_service import config_service
from app.services.spreadsheet_reader import SpreadsheetReadError, read_rows

logger = logging.getLogger("app.import")

HISTORY_LIMIT = 10


class ImportValidationError(Exception):
    """Raised when a batch is rejected before any file is processed."""


@dataclass(frozen=True)
class ColumnMapping:
    """Column index for each store field; None means the sheet has no such column."""

    store_name: int = 0
    province: Optional[int] = 1
    address: Optional[int] = 2
    city: Optional[int] = 3
    contact_person: Optional[int] = 4
    phone: Optional[int] = 5
    email: Optional[int] = 6


DEFAULT_COLUMN_MAPPING = ColumnMapping()

HEADER_ALIASES: Dict[str, Sequence[str]] = {
    "store_name": ("store name", "store", "name", "company", "company name", "business name"),
    "province": ("province", "region", "state"),
    "address": ("address", "street address", "street", "physical address"),
    "city": ("city", "town"),
    "contact_person": ("contact person", "contact", "contact name", "customer name", "owner"),
    "phone": ("phone", "phone number", "telephone", "tel", "cell", "mobile"),
    "email": ("email", "e-mail", "email address"),
}


def _normalize_header(value: str) -> str:
    return " ".join(str(value).strip().lower().replace("_", " ").split())


def build_column_mapping(header_row: Sequence[str]) -> ColumnMapping:
    """
    Build the column mapping for a file from its header row.

    Recognised header names win; a header row without a store-name column
    falls back to the positional layout.
    """
    normalized = [_normalize_header(cell) for cell in header_row]
    positions: Dict[str, int] = {}

    for field_name, aliases in HEADER_ALIASES.items():
        for index, cell in enumerate(normalized):
            if cell in aliases and index not in positions.values():
                positions[field_name] = index
                break

    if "store_name" not in positions:
        return DEFAULT_COLUMN_MAPPING

    return ColumnMapping(**{field_name: positions.get(field_name) for field_name in HEADER_ALIASES})


def _cell(row: Sequence[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return str(row[index]).strip()


def generate_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def generate_store_code() -> str:
    return f"BULK_{int(time.time() * 1000)}_{uuid.uuid4().hex[:5]}"


@dataclass
class UploadedSpreadsheet:
    file_name: str
    content: bytes


@dataclass
class RowOutcome:
    """Tagged result of one data row: imported, skipped or failed."""

    row_number: int
    status: str
    store: Optional[HardwareStore] = None
    reason: Optional[str] = None
    error: Optional[str] = None


@dataclass
class FileImportResult:
    file_name: str
    total_rows: int = 0
    valid_rows: int = 0
    imported_rows: int = 0
    status: str = "success"
    error: Optional[str] = None
    preview: List[Dict[str, Any]] = field(default_factory=list)
    duration_seconds: float = 0.0
    row_errors: List[str] = field(default_factory=list)

    @classmethod
    def failed(cls, file_name: str, message: str, duration_seconds: float = 0.0) -> "FileImportResult":
        return cls(file_name=file_name, status="error", error=message, duration_seconds=duration_seconds)

    def performance(self) -> ImportPerformance:
        return ImportPerformance.from_counts(
            total_rows=self.total_rows,
            valid_rows=self.valid_rows,
            imported_rows=self.imported_rows,
            import_duration=round(self.duration_seconds, 3),
            errors_detected=self.row_errors,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "fileName": self.file_name,
            "totalRows": self.total_rows,
            "validRows": self.valid_rows,
            "importedRows": self.imported_rows,
            "status": self.status,
            "preview": self.preview,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class BatchResult:
    session_id: str
    results: List[FileImportResult]
    total_imported: int
    status: str = "completed"
    achievements: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        failed_files = sum(1 for result in self.results if result.status == "error")
        message = f"Processed {len(self.results)} files, imported {self.total_imported} stores"
        if failed_files:
            message += f" ({failed_files} files failed)"
        return {
            "success": True,
            "sessionId": self.session_id,
            "totalImported": self.total_imported,
            "results": [result.to_dict() for result in self.results],
            "message": message,
            "achievements": self.achievements,
        }


class ImportService:
    """Service for processing bulk spreadsheet imports."""

    def __init__(self, config=None):
        self.config = config or config_service

    def process_batch(
        self, files: List[UploadedSpreadsheet], db: Session, user_id: Optional[str] = None
    ) -> BatchResult:
        """
        Import every file of a batch, one after another.

        A failing file never stops the batch. When a user is given, each
        parsed file's performance is handed to the achievement service.

        Args:
            files: Uploaded spreadsheets, in submission order
            db: Database session
            user_id: User who uploaded the batch

        Returns:
            Batch result with per-file outcomes

        Raises:
            ImportValidationError: If the batch is empty
        """
        if not files:
            raise ImportValidationError("No files provided")

        session_id = generate_session_id()
        started_at = self.config.now()
        session = ImportSession(
            id=session_id,
            name=f"Import Session {started_at.strftime('%Y-%m-%d %H:%M:%S')}",
            total_files=len(files),
            processed_files=0,
            status="active",
            created_by=user_id,
            created_at=started_at,
        )
        db.add(session)
        db.commit()

        logger.info(f"Processing {len(files)} files for session {session_id}")

        results = []
        for position, upload in enumerate(files):
            result = self.process_file(upload, session_id, db)
            results.append(result)
            self._save_file_result(session, position, result, db)

        total_imported = sum(result.imported_rows for result in results)
        session.status = "failed" if all(result.status == "error" for result in results) else "completed"
        session.total_imported = total_imported
        session.completed_at = self.config.now()
        db.commit()

        logger.info(f"Bulk import completed: session={session_id} status={session.status} imported={total_imported}")

        batch = BatchResult(
            session_id=session_id, results=results, total_imported=total_imported, status=session.status
        )

        if user_id:
            batch.achievements = self._record_achievements(user_id, session_id, results, db)

        return batch

    def process_file(self, upload: UploadedSpreadsheet, session_id: str, db: Session) -> FileImportResult:
        """
        Import the first worksheet of one file.

        Args:
            upload: Uploaded spreadsheet
            session_id: Import session ID
            db: Database session

        Returns:
            File result; status "error" if the file could not be processed
        """
        started = time.perf_counter()
        logger.info(f"Processing file: {upload.file_name}")

        try:
            rows = read_rows(upload.content, upload.file_name)
            mapping = build_column_mapping(rows[0]) if rows else DEFAULT_COLUMN_MAPPING
            preview_size = self.config.preview_size

            result = FileImportResult(file_name=upload.file_name, total_rows=max(len(rows) - 1, 0))

            # Row 0 is the header
            for index in range(1, len(rows)):
                outcome = self.process_row(rows[index], index + 1, mapping, upload.file_name, session_id, db)

                if outcome.status == "skipped":
                    logger.debug(f"Skipped row {outcome.row_number} of {upload.file_name}: {outcome.reason}")
                    continue

                result.valid_rows += 1
                if outcome.status == "failed":
                    result.row_errors.append(f"Row {outcome.row_number}: {outcome.error}")
                    continue

                result.imported_rows += 1
                if len(result.preview) < preview_size:
                    result.preview.append(
                        {
                            "storeName": outcome.store.store_name,
                            "province": outcome.store.province,
                            "city": outcome.store.city,
                            "status": "imported",
                        }
                    )

            result.duration_seconds = time.perf_counter() - started
            logger.info(f"File processed: {upload.file_name} - {result.imported_rows} stores imported")
            return result

        except SpreadsheetReadError as e:
            logger.error(f"Error processing file {upload.file_name}: {e}")
            return FileImportResult.failed(upload.file_name, str(e), time.perf_counter() - started)
        except Exception as e:
            logger.error(f"Unexpected error processing file {upload.file_name}: {e}")
            db.rollback()
            return FileImportResult.failed(upload.file_name, str(e) or "Unknown error", time.perf_counter() - started)

    def is_header_like(self, store_name: str) -> bool:
        lowered = store_name.lower()
        return any(keyword in lowered for keyword in self.config.skip_keywords())

    def process_row(
        self,
        row: Sequence[str],
        row_number: int,
        mapping: ColumnMapping,
        file_name: str,
        session_id: str,
        db: Session,
    ) -> RowOutcome:
        """
        Filter, map and persist one data row.

        Persistence failures are logged and reported as a failed outcome.
        """
        store_name = _cell(row, mapping.store_name)
        if not store_name:
            return RowOutcome(row_number=row_number, status="skipped", reason="empty store name")
        if self.is_header_like(store_name):
            return RowOutcome(row_number=row_number, status="skipped", reason="header-like row")

        store = self.build_store(row, mapping, session_id)
        try:
            db.add(store)
            db.commit()
            db.refresh(store)
        except Exception as e:
            db.rollback()
            logger.error(f"Error importing row {row_number} of {file_name}: {e}")
            self._log_error(session_id, file_name, row_number, "persistence", str(e), store_name, db)
            return RowOutcome(row_number=row_number, status="failed", error=str(e))

        logger.debug(f"Imported: {store.store_name}")
        return RowOutcome(row_number=row_number, status="imported", store=store)

    def build_store(self, row: Sequence[str], mapping: ColumnMapping, session_id: Optional[str] = None) -> HardwareStore:
        return HardwareStore(
            store_code=generate_store_code(),
            store_name=_cell(row, mapping.store_name),
            address=_cell(row, mapping.address),
            province=_cell(row, mapping.province) or "Unknown",
            city=_cell(row, mapping.city) or "Unknown",
            contact_person=_cell(row, mapping.contact_person) or None,
            phone=_cell(row, mapping.phone) or None,
            email=_cell(row, mapping.email) or None,
            credit_limit=Decimal("0.00"),
            store_type="hardware",
            is_active=True,
            import_session_id=session_id,
        )

    def _save_file_result(self, session: ImportSession, position: int, result: FileImportResult, db: Session):
        db.add(
            ImportSessionFile(
                session_id=session.id,
                position=position,
                file_name=result.file_name,
                total_rows=result.total_rows,
                valid_rows=result.valid_rows,
                imported_rows=result.imported_rows,
                status=result.status,
                error_message=result.error,
                preview_json=json.dumps(result.preview),
                duration_seconds=result.duration_seconds,
            )
        )
        session.processed_files = position + 1
        db.commit()

    def _record_achievements(
        self, user_id: str, session_id: str, results: List[FileImportResult], db: Session
    ) -> List[Dict[str, Any]]:
        unlocked = []
        for result in results:
            if result.status != "success" or result.total_rows == 0:
                continue
            try:
                achievements = achievement_service.record_import_metrics(
                    user_id, session_id, result.file_name, result.performance(), db
                )
                unlocked.extend(achievement_to_dict(achievement) for achievement in achievements)
            except Exception as e:
                logger.warning(f"Failed to record achievements for {result.file_name}: {e}")
        return unlocked

    def _log_error(
        self,
        session_id: str,
        file_name: str,
        row_number: int,
        error_type: str,
        error_message: str,
        cell_value: Optional[str],
        db: Session,
    ):
        """
        Log import error to database.

        Args:
            session_id: Import session ID
            file_name: File the row came from
            row_number: Spreadsheet row number
            error_type: Type of error
            error_message: Error message
            cell_value: Store name cell of the failing row
            db: Database session
        """
        try:
            error = ImportErrorLog(
                session_id=session_id,
                file_name=file_name,
                row_number=row_number,
                error_type=error_type,
                error_message=error_message[:2000],
                cell_value=cell_value,
            )
            db.add(error)
            db.commit()

            logger.warning(f"Import error logged: {error_type} at row {row_number}: {error_message}")

        except Exception as e:
            logger.error(f"Failed to log import error: {e}")
            db.rollback()

    def get_session_status(self, session_id: str, db: Session, include_errors: bool = False) -> Optional[Dict[str, Any]]:
        """
        Persisted status of an import session.

        Args:
            session_id: Import session ID
            db: Database session
            include_errors: Add row-level errors to the payload

        Returns:
            Session dictionary, or None if the session does not exist
        """
        session = db.query(ImportSession).filter(ImportSession.id == session_id).first()
        if not session:
            return None

        files = (
            db.query(ImportSessionFile)
            .filter(ImportSessionFile.session_id == session_id)
            .order_by(ImportSessionFile.position)
            .all()
        )

        data = session_to_dict(session)
        data["files"] = [session_file_to_dict(session_file) for session_file in files]

        if include_errors:
            errors = (
                db.query(ImportErrorLog)
                .filter(ImportErrorLog.session_id == session_id)
                .order_by(ImportErrorLog.id)
                .all()
            )
            data["errors"] = [
                {
                    "fileName": error.file_name,
                    "rowNumber": error.row_number,
                    "errorType": error.error_type,
                    "errorMessage": error.error_message,
                    "cellValue": error.cell_value,
                    "createdAt": error.created_at.isoformat() if error.created_at else None,
                }
                for error in errors
            ]

        return data

    def list_sessions(self, db: Session, limit: int = HISTORY_LIMIT) -> List[Dict[str, Any]]:
        sessions = (
            db.query(ImportSession).order_by(ImportSession.created_at.desc(), ImportSession.id.desc()).limit(limit).all()
        )
        return [session_to_dict(session) for session in sessions]


def session_to_dict(session: ImportSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "name": session.name,
        "status": session.status,
        "totalFiles": session.total_files,
        "processedFiles": session.processed_files,
        "totalImported": session.total_imported,
        "createdBy": session.created_by,
        "createdAt": session.created_at.isoformat() if session.created_at else None,
        "completedAt": session.completed_at.isoformat() if session.completed_at else None,
    }


def session_file_to_dict(session_file: ImportSessionFile) -> Dict[str, Any]:
    data = {
        "fileName": session_file.file_name,
        "totalRows": session_file.total_rows,
        "validRows": session_file.valid_rows,
        "importedRows": session_file.imported_rows,
        "status": session_file.status,
        "preview": json.loads(session_file.preview_json or "[]"),
        "durationSeconds": session_file.duration_seconds,
    }
    if session_file.error_message:
        data["error"] = session_file.error_message
    return data


# Global instance
import_service = ImportService()
