from __future__ import annotations

import logging

from fastapi import UploadFile

from inspection_hub.config import settings
from inspection_hub.errors import NotFoundError, ValidationFailedError
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import DocumentCategory
from inspection_hub.services.request import InspectionRequests
from inspection_hub.store import EntityNotFound, EntityStore, Record

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"
JPEG_SIGNATURE = b"\xff\xd8\xff"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
ZIP_SIGNATURE = b"PK\x03\x04"  # docx / xlsx containers

_SIGNATURES = {
    "application/pdf": (PDF_SIGNATURE,),
    "image/jpeg": (JPEG_SIGNATURE,),
    "image/png": (PNG_SIGNATURE,),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        ZIP_SIGNATURE,
    ),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        ZIP_SIGNATURE,
    ),
}


def get_allowed_types() -> set[str]:
    return {t.strip() for t in settings.allowed_document_types.split(",") if t.strip()}


def validate_document(content_type: str | None, content: bytes) -> None:
    allowed_types = get_allowed_types()
    if content_type not in allowed_types:
        raise ValidationFailedError(
            f"Invalid file type. Allowed: {', '.join(sorted(allowed_types))}",
            details={"content_type": content_type},
        )
    if not content:
        raise ValidationFailedError("Uploaded file is empty")
    if len(content) > settings.max_upload_size_bytes:
        raise ValidationFailedError(
            f"File too large. Maximum size: {settings.max_upload_size_bytes // 1024 // 1024}MB",
            details={"size": len(content)},
        )
    signatures = _SIGNATURES.get(content_type)
    if signatures and not content.startswith(signatures):
        raise ValidationFailedError(
            "File content does not match declared content type.",
            details={"content_type": content_type},
        )


class Documents:
    @staticmethod
    async def upload(
        store: EntityStore,
        request_id: str,
        file: UploadFile,
        actor: Actor,
        document_name: str | None = None,
        category: DocumentCategory = DocumentCategory.other,
    ) -> Record:
        await InspectionRequests.get(store, request_id)

        content = await file.read()
        validate_document(file.content_type, content)
        filename = file.filename or "document"
        file_url = await store.upload_file(filename, content, file.content_type)

        document = await store.documents.create(
            {
                "inspection_request_id": request_id,
                "document_name": document_name or filename,
                "original_filename": filename,
                "file_url": file_url,
                "document_category": category.value,
                "file_type": file.content_type,
                "file_size": len(content),
                "created_by": actor.email,
            }
        )
        logger.info(
            "Uploaded document %s (%d bytes) to request %s",
            document["id"],
            len(content),
            request_id,
        )
        return document

    @staticmethod
    async def get(store: EntityStore, document_id: str) -> Record:
        try:
            return await store.documents.get(document_id)
        except EntityNotFound:
            raise NotFoundError(
                "Document not found", details={"document_id": document_id}
            ) from None

    @staticmethod
    async def delete(store: EntityStore, document_id: str, actor: Actor) -> None:
        await Documents.get(store, document_id)
        await store.documents.delete(document_id)
        logger.info("Deleted document %s by %s", document_id, actor.email)


documents = Documents()
