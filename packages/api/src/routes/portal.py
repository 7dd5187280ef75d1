# This project was developed with assistance from AI tools.
"""Actor self-service portal, authenticated by the per-actor access token."""

import logging

from db import Policy, get_db
from db.enums import ActorType, DocumentCategory
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.actor import (
    ActorDetail,
    ActorPortalResponse,
    ActorUpdate,
    DocumentResponse,
    SubmissionResult,
)
from ..services import actors as actor_service
from ..services.actor_config import get_descriptor
from ..services.completeness import get_actor_completeness
from ..services.storage import ALLOWED_CONTENT_TYPES, StorageService, get_storage_service
from ..services.tokens import validate_actor_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{actor_type}/{token}", response_model=ActorPortalResponse)
async def open_portal(
    actor_type: ActorType,
    token: str,
    session: AsyncSession = Depends(get_db),
) -> ActorPortalResponse:
    """Actor data, completeness and documents. Still readable after submission."""
    actor = await validate_actor_token(session, actor_type, token, allow_complete=True)
    policy = await session.get(Policy, actor.policy_id)
    return ActorPortalResponse(
        actor_type=actor_type,
        policy_number=policy.policy_number,
        policy_status=policy.status,
        actor=ActorDetail.model_validate(actor),
        completeness=get_actor_completeness(actor_type, actor),
        documents=[DocumentResponse.model_validate(doc) for doc in actor.documents],
    )


@router.patch("/{actor_type}/{token}", response_model=ActorDetail)
async def save_information(
    actor_type: ActorType,
    token: str,
    body: ActorUpdate,
    session: AsyncSession = Depends(get_db),
) -> ActorDetail:
    """Save progress; nothing is checked for completeness until submit."""
    actor = await validate_actor_token(session, actor_type, token)
    actor = await actor_service.update_actor(
        session,
        actor_type,
        actor.id,
        body,
        performed_by=actor.email,
        performed_by_type="actor",
        actor=actor,
    )
    return ActorDetail.model_validate(actor)


@router.post("/{actor_type}/{token}/submit", response_model=SubmissionResult)
async def submit_information(
    actor_type: ActorType,
    token: str,
    session: AsyncSession = Depends(get_db),
) -> SubmissionResult:
    actor = await validate_actor_token(session, actor_type, token)
    return await actor_service.submit_actor(session, actor_type, actor.id, submitted_by=actor.email)


@router.post(
    "/{actor_type}/{token}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    actor_type: ActorType,
    token: str,
    file: UploadFile = File(...),
    category: DocumentCategory = Form(...),
    session: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> DocumentResponse:
    """Store the file in object storage and register it against the actor."""
    actor = await validate_actor_token(session, actor_type, token)

    content_type = file.content_type or ""
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=422,
            detail=f"Unsupported file type: {content_type}. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}",
        )

    file_data = await file.read()
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if len(file_data) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds maximum size of {settings.UPLOAD_MAX_SIZE_MB} MB",
        )

    descriptor = get_descriptor(actor_type)
    object_key = StorageService.build_object_key(
        actor.policy_id, descriptor.portal_path, actor.id, file.filename or "document",
    )
    await storage.upload_file(file_data, object_key, content_type)

    document = await actor_service.register_document(
        session,
        actor_type,
        actor,
        category=category,
        file_name=file.filename or "document",
        storage_key=object_key,
        mime_type=content_type,
        file_size=len(file_data),
        uploaded_by=actor.email,
    )
    logger.info("Document %s uploaded by %s %s", document.id, actor_type.value, actor.id)
    return DocumentResponse.model_validate(document)
