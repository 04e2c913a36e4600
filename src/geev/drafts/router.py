"""Draft endpoints: list, read, create, edit and discard unpublished posts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from geev.dependencies import get_drafts
from geev.drafts.schemas import Draft, DraftCreateRequest, DraftListResponse, DraftUpdateRequest
from geev.drafts.service import DraftStore

router = APIRouter(prefix="/api/drafts", tags=["Drafts"])


@router.get("", response_model=DraftListResponse)
async def list_drafts(drafts: DraftStore = Depends(get_drafts)) -> DraftListResponse:
    items = await drafts.get_drafts()
    return DraftListResponse(drafts=items, total=len(items))


@router.get("/{draft_id}", response_model=Draft)
async def get_draft(draft_id: str, drafts: DraftStore = Depends(get_drafts)) -> Draft:
    draft = await drafts.get_draft(draft_id)
    if draft is None:
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft


@router.post("", response_model=Draft, status_code=201)
async def create_draft(body: DraftCreateRequest, drafts: DraftStore = Depends(get_drafts)) -> Draft:
    return await drafts.create_draft(**body.model_dump(exclude_none=True))


@router.patch("/{draft_id}", response_model=Draft)
async def update_draft(
    draft_id: str,
    body: DraftUpdateRequest,
    drafts: DraftStore = Depends(get_drafts),
) -> Draft:
    """Merge the non-null fields of the body into a stored draft."""
    draft = await drafts.update_draft(draft_id, **body.model_dump(exclude_none=True))
    if draft is None:
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft


@router.delete("/{draft_id}", status_code=204)
async def delete_draft(draft_id: str, drafts: DraftStore = Depends(get_drafts)) -> Response:
    if await drafts.get_draft(draft_id) is None:
        raise HTTPException(status_code=404, detail="Draft not found")
    await drafts.delete_draft(draft_id)
    return Response(status_code=204)
