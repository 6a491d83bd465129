"""Practice router - FastAPI endpoints for practice records"""

from fastapi import APIRouter, Depends, Request

from ...identity import Identity, get_identity
from .schemas import Practice, PracticeCreate
from .service import PracticeService

router = APIRouter(prefix="/v1/practices", tags=["Practices"])


def get_practice_service(request: Request) -> PracticeService:
    """Dependency injection for PracticeService"""
    return request.app.state.practice_service


@router.post("", status_code=201, response_model=Practice, response_model_exclude_none=True)
def create_practice(
    data: PracticeCreate,
    identity: Identity = Depends(get_identity),
    service: PracticeService = Depends(get_practice_service),
):
    """Register a practice for the caller's tenant"""
    return service.create_practice(data, identity)


@router.get("/{practice_id}", response_model=Practice, response_model_exclude_none=True)
def get_practice(
    practice_id: str,
    service: PracticeService = Depends(get_practice_service),
):
    """Get a practice by ID"""
    return service.get_practice(practice_id)
