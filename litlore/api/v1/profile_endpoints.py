"""
API endpoints for profiles and service health.
"""

from fastapi import APIRouter, Depends

from litlore import config
from litlore.domain.ports import DocumentStore
from litlore.domain.services import ProfileService
from litlore.api.v1 import schemas as api
from litlore.api.v1.converters import domain_profile_to_api
from litlore.api.v1.dependencies import get_document_store, get_profile_service

router = APIRouter()


@router.get("/users/{user_id}/profile", response_model=api.Profile)
async def get_profile(
    user_id: str,
    service: ProfileService = Depends(get_profile_service),
) -> api.Profile:
    """
    Everything shown on a user's profile.

    Always 200: sections whose query failed are empty and listed in
    `errors`.
    """
    return domain_profile_to_api(await service.load_profile(user_id))


@router.get("/health")
async def health_check(
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    """
    Check that the document store answers.

    Returns "ok" when a trivial read succeeds, "degraded" otherwise.
    """
    try:
        await store.get("Health/ping")
        store_ready = True
    except Exception:
        store_ready = False

    return {
        "status": "ok" if store_ready else "degraded",
        "components": {
            "document_store": store_ready,
        },
        "store_backend": config.STORE_BACKEND,
    }
