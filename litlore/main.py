"""
Main application entry point.
"""

from fastapi import FastAPI

from litlore.config import configure_logging
from litlore.api.v1.catalog_endpoints import router as catalog_router
from litlore.api.v1.profile_endpoints import router as profile_router
from litlore.api.v1.review_endpoints import router as review_router
from litlore.api.v1.saved_books_endpoints import router as saved_books_router
from litlore.api.v1.social_endpoints import router as social_router

configure_logging()

app = FastAPI(
    title="LitLore API",
    description="Books, reviews, follows and saved books for the LitLore reading community.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Include API routers
app.include_router(catalog_router, prefix="/api/v1", tags=["catalog"])
app.include_router(review_router, prefix="/api/v1", tags=["reviews"])
app.include_router(social_router, prefix="/api/v1", tags=["users"])
app.include_router(saved_books_router, prefix="/api/v1", tags=["saved-books"])
app.include_router(profile_router, prefix="/api/v1", tags=["profile"])


@app.get("/")
def read_root():
    """Root endpoint."""
    return {
        "message": "Welcome to the LitLore API",
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("litlore.main:app", host="0.0.0.0", port=8000, reload=True)
