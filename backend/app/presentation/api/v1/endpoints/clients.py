"""Client list/detail endpoints and the list-refresh event stream."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from app.application.schemas.client import ClientDetailResponse, ClientSummaryResponse
from app.application.services import ClientService, ClientStatusFilter, SSEManager
from app.domain.entities import ClientType
from app.domain.exceptions import EntityNotFoundError
from app.infrastructure.dependencies import get_client_service, get_sse_manager

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("", response_model=list[ClientSummaryResponse])
async def list_clients(
    search: str | None = Query(None, description="Match on name, contact or email"),
    type: ClientType | None = Query(None, description="Filter by client type"),
    client_status: ClientStatusFilter = Query(ClientStatusFilter.ACTIVE, alias="status"),
    service: ClientService = Depends(get_client_service),
) -> list[ClientSummaryResponse]:
    """List clients with their active-contract flag and contact/member counts."""
    summaries = await service.list_clients(
        search=search, type_filter=type, status=client_status
    )
    return [ClientSummaryResponse.from_summary(s) for s in summaries]


@router.get("/events")
async def client_events(sse: SSEManager = Depends(get_sse_manager)):
    """SSE stream of ``invalidate`` events.

    Each event carries the resource key (``clients``, ``client_contacts_count``,
    ``client_members_count``) whose cached data should be refetched.
    """
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/{client_id}", response_model=ClientDetailResponse)
async def get_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
) -> ClientDetailResponse:
    """Retrieve a client with its contacts and members."""
    try:
        detail = await service.get_client_detail(client_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ClientDetailResponse.from_detail(detail)
