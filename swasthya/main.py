from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pymongo.errors import PyMongoError
from swasthya.config import settings
from swasthya.database import Database
from swasthya.features.auth.router import router as auth_router
from swasthya.features.clinic.router import router as clinic_router, admin_router as clinic_admin_router
from swasthya.features.doctors.router import router as doctors_router, professionals_router
from swasthya.features.schedules.router import router as schedules_router
from swasthya.features.patients.router import router as patients_router
from swasthya.features.appointments.router import router as appointments_router, queue_router
from swasthya.features.family.router import router as family_router
from swasthya.core.logging import logger
from swasthya.shared.exceptions import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI application."""
    # Startup
    logger.info("Starting Swasthya API...")
    await Database.connect_db()
    logger.info("Application started successfully")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await Database.close_db()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Swasthya clinic directory and appointment booking API",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers; the fixed /clinic/* paths go before the /clinic/{clinic_id}/* ones
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(schedules_router, prefix=settings.API_PREFIX)
app.include_router(doctors_router, prefix=settings.API_PREFIX)
app.include_router(patients_router, prefix=settings.API_PREFIX)
app.include_router(queue_router, prefix=settings.API_PREFIX)
app.include_router(clinic_router, prefix=settings.API_PREFIX)
app.include_router(clinic_admin_router, prefix=settings.API_PREFIX)
app.include_router(professionals_router, prefix=settings.API_PREFIX)
app.include_router(appointments_router, prefix=settings.API_PREFIX)
app.include_router(family_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Liveness plus a MongoDB ping; a failed ping reports "degraded"."""
    database = "disconnected"
    if Database.client is not None:
        try:
            await Database.client.admin.command("ping")
            database = "connected"
        except PyMongoError as e:
            logger.warning(f"Health check ping failed: {e}")

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
        "environment": settings.ENVIRONMENT,
    }
