"""
Grumo Fan-Out - Main FastAPI Application.

REST surface of the order orchestrator: payment-confirmation trigger,
explicit re-submission and read-only diagnostics.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from api.dependencies import current_coordinator
from api.routes import health, payments, store_orders, stores, transactions
from core.infrastructure.database.config import close_database, init_database
from core.infrastructure.logging import configure_logging


# Setup logging
configure_logging(logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Grumo Fan-Out - Order Orchestrator API",
    description="""
    Turns a paid marketplace transaction into one order per store.

    Features:
    - Payment confirmation trigger
    - Concurrent per-store order submission with retries
    - Explicit re-submission of failed stores
    - Read-only diagnostics of transactions and store orders
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()

    logger.info(f"→ {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"← {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )

    return response


# =============================================================================
# GLOBAL EXCEPTION HANDLER
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "path": request.url.path
        }
    )


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("🚀 Grumo Fan-Out API starting up...")
    await init_database()
    logger.info("📚 Swagger UI available at: /docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Let in-flight store orders record their outcome, then close the pool."""
    coordinator = current_coordinator()
    if coordinator is not None:
        await coordinator.shutdown()
    await close_database()
    logger.info("👋 Grumo Fan-Out API shutting down...")


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(
    health.router,
    tags=["Health"]
)

app.include_router(
    payments.router,
    prefix="/api/v1/payments",
    tags=["Payments"]
)

app.include_router(
    transactions.router,
    prefix="/api/v1/transactions",
    tags=["Transactions"]
)

app.include_router(
    stores.router,
    prefix="/api/v1/stores",
    tags=["Stores"]
)

app.include_router(
    store_orders.router,
    prefix="/api/v1/store-orders",
    tags=["Store Orders"]
)


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "message": "Grumo Fan-Out - Order Orchestrator API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
