"""API router initializers."""

from fastapi import APIRouter


def get_api_router() -> APIRouter:
    """Construct and return the API router."""

    from backend.routers.booking import router as booking_router
    from backend.routers.diagnostics import router as diagnostics_router

    api_router = APIRouter()
    api_router.include_router(booking_router, tags=["booking"])
    api_router.include_router(diagnostics_router, tags=["diagnostics"])
    return api_router
