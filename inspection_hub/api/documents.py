from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from inspection_hub.api.deps import get_store, require_user_auth
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import ClientDocumentRead, DocumentCategory
from inspection_hub.services import document as document_service
from inspection_hub.store import EntityStore

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=ClientDocumentRead, status_code=status.HTTP_201_CREATED)
async def upload_document(
    inspection_request_id: str = Form(...),
    document_category: DocumentCategory = Form(DocumentCategory.other),
    document_name: str | None = Form(None),
    file: UploadFile = File(...),
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await document_service.documents.upload(
        store,
        inspection_request_id,
        file,
        actor,
        document_name=document_name,
        category=document_category,
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> None:
    await document_service.documents.delete(store, document_id, actor)
