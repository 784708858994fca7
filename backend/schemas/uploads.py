from typing import Literal

from pydantic import BaseModel, EmailStr, Field

PdfCategory = Literal["contact_enrichment_pdf", "keyword_research_pdf", "rules_upload_pdf"]
UploadAction = Literal["clear", "update"]


class GenerateUploadUrlRequest(BaseModel):
    # presence is checked by the issuer so missing fields get one combined message
    filename: str | None = None
    category: PdfCategory | None = None
    userId: str | None = None
    userEmail: EmailStr | None = None
    action: UploadAction | None = None


class SaveFileRequest(BaseModel):
    userId: str = Field(..., min_length=1)
    category: PdfCategory
    original_filename: str = Field(..., min_length=1)
    cloudinary_url: str = Field(..., pattern=r"^https?://\S+$")
    cloudinary_public_id: str = Field(..., min_length=1)
    file_size: int | None = Field(None, ge=1)
