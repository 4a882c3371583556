"""Notes CRUD — every query scoped to the caller's tenant."""

import uuid

from fastapi import APIRouter, status

from app.api.deps import Auth, Quota, Scope, Store
from app.models.note import Note, NoteAuthor, NoteRead, NoteWrite
from app.models.user import User

router = APIRouter(prefix="/notes", tags=["notes"])


def _to_read(note: Note, author: User | None = None) -> NoteRead:
    return NoteRead(
        id=note.id,
        tenant_id=note.tenant_id,
        user_id=note.user_id,
        title=note.title,
        content=note.content,
        created_at=note.created_at,
        updated_at=note.updated_at,
        author=NoteAuthor(id=author.id, email=author.email) if author else None,
    )


@router.post("", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteWrite,
    auth: Auth,
    store: Store,
    quota: Quota,
) -> NoteRead:
    """Create a note. Free tenants are capped; see QuotaEnforcer."""
    note = await quota.create_note(store, auth, body.title, body.content)
    read = _to_read(note)
    read.author = NoteAuthor(id=auth.principal_id, email=auth.email)
    return read


@router.get("", response_model=list[NoteRead])
async def list_notes(scope: Scope) -> list[NoteRead]:
    return [_to_read(note, author) for note, author in await scope.list_notes()]


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(note_id: uuid.UUID, scope: Scope) -> NoteRead:
    note, author = await scope.find_note(note_id)
    return _to_read(note, author)


@router.put("/{note_id}", response_model=NoteRead)
async def update_note(note_id: uuid.UUID, body: NoteWrite, scope: Scope) -> NoteRead:
    note, author = await scope.update_note(note_id, body.title, body.content)
    return _to_read(note, author)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: uuid.UUID, scope: Scope) -> None:
    await scope.delete_note(note_id)
