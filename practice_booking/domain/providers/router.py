"""Provider router - FastAPI endpoints for provider records"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...identity import Identity, get_identity
from .schemas import Provider, ProviderCreate, ProviderListResponse
from .service import ProviderService

router = APIRouter(prefix="/v1/providers", tags=["Providers"])


def get_provider_service(request: Request) -> ProviderService:
    """Dependency injection for ProviderService"""
    return request.app.state.provider_service


@router.post("", status_code=201, response_model=Provider, response_model_exclude_none=True)
def create_provider(
    data: ProviderCreate,
    identity: Identity = Depends(get_identity),
    service: ProviderService = Depends(get_provider_service),
):
    """Add a provider to one of the caller's practices"""
    return service.create_provider(data, identity)


@router.get("", response_model=ProviderListResponse, response_model_exclude_none=True)
def list_providers(
    practice_id: Optional[str] = Query(None, alias="practiceId"),
    service: ProviderService = Depends(get_provider_service),
):
    """List providers, optionally for one practice"""
    return service.list_providers(practice_id)


@router.get("/{provider_id}", response_model=Provider, response_model_exclude_none=True)
def get_provider(
    provider_id: str,
    service: ProviderService = Depends(get_provider_service),
):
    """Get a provider by ID"""
    return service.get_provider(provider_id)
