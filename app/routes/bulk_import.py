"""
Bulk import routes for uploading spreadsheets of hardware stores.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.database.session import get_session
from app.services.config_service import config_service
from app.services.import_service import ImportValidationError, UploadedSpreadsheet, import_service

router = APIRouter(prefix="/api/bulk-import", tags=["bulk-import"])
logger = logging.getLogger("app.import")

ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".csv")


async def _read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedSpreadsheet]:
    """Validate the multipart batch and read every file into memory."""
    if not files:
        raise HTTPException(status_code=400, detail="No files provided")

    max_files = config_service.max_files_per_batch
    if len(files) > max_files:
        raise HTTPException(status_code=400, detail=f"Too many files: at most {max_files} allowed")

    max_size = config_service.max_file_size_bytes
    uploads = []
    for file in files:
        file_name = file.filename or ""
        if not file_name.lower().endswith(ALLOWED_EXTENSIONS):
            raise HTTPException(
                status_code=400, detail=f"Invalid file type: {file_name}. Only Excel and CSV files are allowed."
            )

        content = await file.read()
        if len(content) > max_size:
            raise HTTPException(
                status_code=400, detail=f"File too large: {file_name} exceeds {max_size // (1024 * 1024)}MB"
            )

        uploads.append(UploadedSpreadsheet(file_name=file_name, content=content))

    return uploads


@router.post("/process")
async def process_bulk_import(
    files: Optional[List[UploadFile]] = File(None),
    user_id: Optional[str] = Form(None),
    db: Session = Depends(get_session),
) -> Dict[str, Any]:
    """
    Upload spreadsheets and import their hardware stores.

    Files that fail to parse are reported per file; the request still
    succeeds.

    Args:
        files: Uploaded .xlsx/.xls/.csv files
        user_id: Uploader, credited with import achievements
        db: Database session

    Returns:
        Batch result with per-file breakdown
    """
    logger.info(f"Processing bulk import with files: {len(files) if files else 0}")

    uploads = await _read_uploads(files)

    try:
        batch = import_service.process_batch(uploads, db, user_id=user_id)
        return batch.to_dict()

    except ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error in bulk import process: {e}")
        raise HTTPException(status_code=500, detail=f"Bulk import failed: {str(e)}")


@router.get("/status/{session_id}")
async def get_import_status(session_id: str, db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Status of an import session for polling.

    Args:
        session_id: Import session ID
        db: Database session

    Returns:
        Session status with file-level breakdown
    """
    session = import_service.get_session_status(session_id, db)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    return session


@router.get("/session/{session_id}")
async def get_import_session(session_id: str, db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Detailed import session including row-level errors.
    """
    logger.info(f"Session details requested: {session_id}")

    session = import_service.get_session_status(session_id, db, include_errors=True)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    return session


@router.get("/history")
async def get_import_history(db: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Latest import sessions, newest first.
    """
    sessions = import_service.list_sessions(db)
    return {"status": "success", "sessions": sessions, "total": len(sessions)}
