import uuid

from sqlalchemy import Column, DateTime, Integer, String, func

from db.base import Base

PDF_CATEGORIES = ("contact_enrichment_pdf", "keyword_research_pdf", "rules_upload_pdf")
UPLOAD_STATUSES = ("pending", "processing", "completed", "failed")
PDF_MIME_TYPE = "application/pdf"


def _new_id() -> str:
    return str(uuid.uuid4())


class PdfUpload(Base):
    __tablename__ = "pdf_uploads"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    original_filename = Column(String, nullable=False)
    stored_filename = Column(String, nullable=False, unique=True)  # storage key
    cloudinary_url = Column(String, nullable=False)
    cloudinary_public_id = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    mime_type = Column(String, nullable=False, default=PDF_MIME_TYPE)
    upload_status = Column(String, nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
