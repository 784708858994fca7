import logging

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db.deps import get_db
from errors import DatastoreError, DuplicateRecordError
from models.pdf_uploads import PDF_MIME_TYPE, PdfUpload
from models.rules import RagRule, Rule

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION_PGCODE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == _UNIQUE_VIOLATION_PGCODE:
        return True
    return "unique constraint" in str(orig).lower()


class UploadRepository:
    """Datastore access for upload records and the rule tables derived from them.

    Driver errors never leave this class: they are rolled back and re-raised as
    ``DatastoreError`` (or ``DuplicateRecordError`` for unique violations).
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: SQLAlchemyError) -> DatastoreError:
        self.db.rollback()
        if isinstance(exc, IntegrityError) and _is_unique_violation(exc):
            return DuplicateRecordError(detail=str(exc.orig))
        return DatastoreError(f"Failed to {action}", detail=str(exc))

    def create(
        self,
        user_id: str,
        category: str,
        original_filename: str,
        cloudinary_url: str,
        cloudinary_public_id: str,
        file_size: int = 0,
        upload_status: str = "completed",
    ) -> PdfUpload:
        record = PdfUpload(
            user_id=user_id,
            category=category,
            original_filename=original_filename,
            stored_filename=cloudinary_public_id,
            cloudinary_url=cloudinary_url,
            cloudinary_public_id=cloudinary_public_id,
            file_size=file_size or 0,
            mime_type=PDF_MIME_TYPE,
            upload_status=upload_status,
        )
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            raise self._fail("save file record", exc) from exc
        return record

    def get(self, record_id: str) -> PdfUpload | None:
        try:
            return self.db.query(PdfUpload).filter(PdfUpload.id == record_id).first()
        except SQLAlchemyError as exc:
            raise self._fail("fetch file record", exc) from exc

    def list_for_user(
        self,
        user_id: str,
        status: str | None = None,
        category: str | None = None,
    ) -> list[PdfUpload]:
        query = (
            self.db.query(PdfUpload)
            .filter(PdfUpload.user_id == user_id)
            .order_by(PdfUpload.created_at.desc())
        )
        if status:
            query = query.filter(PdfUpload.upload_status == status)
        if category:
            query = query.filter(PdfUpload.category == category)

        try:
            return query.all()
        except SQLAlchemyError as exc:
            raise self._fail("fetch files", exc) from exc

    def list_for_category(self, user_id: str, category: str) -> list[PdfUpload]:
        return self.list_for_user(user_id, category=category)

    def delete(self, record_id: str) -> int:
        try:
            deleted = self.db.query(PdfUpload).filter(PdfUpload.id == record_id).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete file record", exc) from exc
        return int(deleted or 0)

    def delete_many(self, record_ids: list[str]) -> int:
        try:
            deleted = (
                self.db.query(PdfUpload)
                .filter(PdfUpload.id.in_(record_ids))
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete file records", exc) from exc
        return int(deleted or 0)

    def _clear_table(self, model) -> int:
        try:
            deleted = self.db.query(model).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail(f"clear {model.__tablename__}", exc) from exc
        return int(deleted or 0)

    def clear_rules(self) -> int:
        return self._clear_table(Rule)

    def clear_rag_rules(self) -> int:
        return self._clear_table(RagRule)


def get_upload_repository(db: Session = Depends(get_db)) -> UploadRepository:
    return UploadRepository(db)
