"""Main FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ehs_audit.config import settings
from ehs_audit.database import engine, Base
from ehs_audit.api.routes import router
from ehs_audit.logging_setup import setup_logging
# Import models to register them with SQLAlchemy Base
from ehs_audit.models.domain import FindingRecord
from ehs_audit.models.audit import AuditEvent

setup_logging()

# Create register tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Turns photo audit findings into a corrective-action register and tracks them to verified closure.",
    version=settings.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api", tags=["Findings"])


# Health check
@app.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
