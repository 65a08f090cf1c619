"""Deal endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, status

from speakerdesk.api.v1._authz import authorize_or_raise
from speakerdesk.core.config import Config
from speakerdesk.core.dependencies import Services, get_services
from speakerdesk.schemas.deals import DealCreateRequest, DealResponse, DealUpdateRequest

router = APIRouter(prefix="/deals", tags=["deals"])


def _authorize(authorization: str | None, scopes: list[str], config: Config):
    return authorize_or_raise(authorization, scopes, config)


@router.get("")
def list_deals(
    search: str | None = Query(default=None, max_length=200),
    status_filter: str | None = Query(default=None, alias="status", max_length=40),
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> list[dict]:
    _authorize(authorization, scopes=["deals.read"], config=services.config)
    if search:
        rows = services.deals.search_deals(search)
    elif status_filter:
        rows = services.deals.get_deals_by_status(status_filter)
    else:
        rows = services.deals.get_all_deals()
    return [DealResponse.model_validate(deal).model_dump(mode="json") for deal in rows]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_deal(
    payload: DealCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    _authorize(authorization, scopes=["deals.write"], config=services.config)
    return services.engine.create_deal(payload.model_dump()).to_response()


@router.get("/{deal_id}")
def get_deal(
    deal_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    _authorize(authorization, scopes=["deals.read"], config=services.config)
    deal = services.engine.get_deal(deal_id)
    return DealResponse.model_validate(deal).model_dump(mode="json")


@router.put("/{deal_id}")
@router.patch("/{deal_id}")
def update_deal(
    deal_id: str,
    payload: DealUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    user = _authorize(authorization, scopes=["deals.write"], config=services.config)
    result = services.engine.apply_update(deal_id, payload.changes(), updated_by=user.actor)
    return result.to_response()


@router.delete("/{deal_id}")
def delete_deal(
    deal_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> dict:
    _authorize(authorization, scopes=["deals.write"], config=services.config)
    services.engine.delete_deal(deal_id)
    return {"message": "Deal deleted successfully"}
