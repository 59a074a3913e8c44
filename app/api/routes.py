"""Root API router."""

from fastapi import APIRouter

from app.api.endpoints import reviews, toilets, users

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}


router.include_router(toilets.router)
router.include_router(reviews.router)
router.include_router(users.router)
