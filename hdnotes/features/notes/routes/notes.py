from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hdnotes.features.auth.dependencies.auth import get_current_identity
from hdnotes.features.auth.schemas.identity import Identity
from hdnotes.features.notes.schemas.note import NoteRequest, NoteResponse
from hdnotes.features.notes.services.note_service import NoteService
from hdnotes.platform.db.session import get_db

# every route below runs behind the auth gate
router = APIRouter(prefix="/notes", tags=["Notes"], dependencies=[Depends(get_current_identity)])


def get_note_service(db: AsyncSession = Depends(get_db)) -> NoteService:
    return NoteService(db)


@router.get(
    "",
    response_model=List[NoteResponse],
    summary="List notes",
    description="Notes of the current user, most recently updated first",
)
async def list_notes(
    identity: Identity = Depends(get_current_identity),
    service: NoteService = Depends(get_note_service),
):
    return await service.list_notes(identity.user_id)


@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a note",
)
async def create_note(
    request: NoteRequest,
    identity: Identity = Depends(get_current_identity),
    service: NoteService = Depends(get_note_service),
):
    return await service.create_note(identity.user_id, request.title, request.content)


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    summary="Update a note",
)
async def update_note(
    note_id: str,
    request: NoteRequest,
    identity: Identity = Depends(get_current_identity),
    service: NoteService = Depends(get_note_service),
):
    return await service.update_note(identity.user_id, note_id, request.title, request.content)


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    identity: Identity = Depends(get_current_identity),
    service: NoteService = Depends(get_note_service),
):
    await service.delete_note(identity.user_id, note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
