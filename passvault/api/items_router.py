"""
API Router for vault records

Every route requires a verified session token.
"""

from fastapi import APIRouter, Depends, Response, status

from ..auth.session import require_session
from ..dependencies import get_record_service
from ..record_models import RecordInput, RecordOut
from ..services.record_service import RecordService

router = APIRouter(prefix="/items", tags=["items"], dependencies=[Depends(require_session)])


@router.get("", response_model=list[RecordOut], summary="List records")
async def list_items(service: RecordService = Depends(get_record_service)) -> list[RecordOut]:
    """All records, newest first, with passwords decrypted."""
    return await service.list_records()


@router.get("/{item_id}", response_model=RecordOut, summary="Get record")
async def get_item(item_id: int, service: RecordService = Depends(get_record_service)) -> RecordOut:
    return await service.get_record(item_id)


@router.post(
    "",
    response_model=RecordOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create record",
)
async def create_item(
    data: RecordInput,
    service: RecordService = Depends(get_record_service),
) -> RecordOut:
    """
    Create a record

    - **title**, **username**, **password**: required
    - **login_url**, **notes**: optional

    The password is encrypted before it is stored.
    """
    return await service.create_record(data)


@router.put("/{item_id}", response_model=RecordOut, summary="Update record")
async def update_item(
    item_id: int,
    data: RecordInput,
    service: RecordService = Depends(get_record_service),
) -> RecordOut:
    return await service.update_record(item_id, data)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete record",
)
async def delete_item(item_id: int, service: RecordService = Depends(get_record_service)) -> Response:
    await service.delete_record(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
