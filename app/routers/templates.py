"""
Template catalog: public listing, admin upload and soft-delete.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_admin
from app.database import get_db
from app.errors import NotFoundError, StorageError, ValidationError
from app.models.admin import Admin
from app.models.template import Template
from app.schemas.envelope import ApiResponse
from app.schemas.templates import TemplateCreated, TemplateResponse
from app.services.file_storage import delete_upload, validate_upload, write_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["Templates"])


@router.get("", response_model=ApiResponse[List[TemplateResponse]])
def list_templates(db: Session = Depends(get_db)):
    """Active templates, newest first"""
    templates = (
        db.query(Template)
        .filter(Template.is_active.is_(True))
        .order_by(Template.created_at.desc(), Template.id.desc())
        .all()
    )
    return ApiResponse(data=[TemplateResponse.model_validate(t) for t in templates])


@router.post("", response_model=ApiResponse[TemplateCreated], status_code=status.HTTP_201_CREATED)
async def create_template(
    name: str = Form(..., min_length=1, max_length=255),
    description: str = Form(..., min_length=1),
    price: Decimal = Form(..., gt=0, max_digits=10, decimal_places=2),
    preview_html: Optional[str] = Form(None),
    background: Optional[UploadFile] = File(None),
    template: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    """
    Upload a new template (admin only).
    The zip archive is required; the background image is optional.
    Both files are validated before either is written to disk.
    """
    if template is None:
        raise ValidationError("Template file is required")

    archive_content = await template.read()
    validate_upload("template", template, archive_content)

    background_content = None
    if background is not None:
        background_content = await background.read()
        validate_upload("background", background, background_content)

    written = []
    try:
        zip_file_path = write_upload("template", template.filename, archive_content)
        written.append(zip_file_path)
        background_path = None
        if background_content is not None:
            background_path = write_upload("background", background.filename, background_content)
            written.append(background_path)

        new_template = Template(
            name=name,
            description=description,
            price=price,
            preview_html=preview_html,
            background_path=background_path,
            zip_file_path=zip_file_path,
        )
        db.add(new_template)
        db.commit()
        db.refresh(new_template)
    except StorageError:
        for path in written:
            delete_upload(path)
        raise
    except SQLAlchemyError as e:
        db.rollback()
        for path in written:
            delete_upload(path)
        logger.error("Failed to add template %r: %s", name, e)
        raise StorageError("Failed to add template")

    logger.info("Admin %s added template %s (%s)", admin.username, new_template.id, name)
    return ApiResponse(
        message="Template added successfully",
        data=TemplateCreated(template_id=new_template.id),
    )


@router.delete("/{template_id}", response_model=ApiResponse)
def delete_template(
    template_id: int,
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    """Soft-delete: the template leaves the catalog but purchase history keeps it."""
    template = db.query(Template).filter(
        Template.id == template_id,
        Template.is_active.is_(True),
    ).first()
    if not template:
        raise NotFoundError("Template not found")

    template.is_active = False
    db.commit()

    logger.info("Admin %s deactivated template %s", admin.username, template_id)
    return ApiResponse(message="Template deleted successfully")
