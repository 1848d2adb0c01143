"""Paid downloads, keyed by transaction id."""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.payments import resolve_download, build_bundle_archive

router = APIRouter(tags=["Downloads"])


@router.get("/download/{transaction_id}")
def download(transaction_id: str, db: Session = Depends(get_db)):
    """Stream the archive(s) of a completed purchase; 404 for anything else"""
    bundle = resolve_download(db, transaction_id)

    if bundle.is_single:
        name, path = bundle.files[0]
        return FileResponse(path, media_type="application/zip", filename=name)

    return Response(
        content=build_bundle_archive(bundle),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{bundle.filename}"'},
    )
