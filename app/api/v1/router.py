from fastapi import APIRouter

from app.api.v1.endpoints import analysis, cases, jobs, review, uploads

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(analysis.router, tags=["Analysis"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])
api_router.include_router(jobs.router, prefix="/analysis-jobs", tags=["Analysis Jobs"])
api_router.include_router(cases.router, prefix="/cases", tags=["Cases"])
api_router.include_router(review.router)

__all__ = ["api_router"]
