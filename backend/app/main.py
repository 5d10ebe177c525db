import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.exceptions import register_exception_handlers
from core.query_logger import query_logger_instance
from app.startup import run_startup_checks, prepare_development_database

# ========== Orders ==========
from modules.orders.routes.order_routes import router as order_router

# ========== Tables ==========
from modules.tables.routes.table_routes import router as table_router
from modules.tables.routes.cart_draft_routes import router as cart_draft_router
from modules.tables.tasks.cart_draft_tasks import cart_draft_sweep_scheduler

# ========== Customers, delivery and settings ==========
from modules.customers.routes.customer_routes import router as customer_router
from modules.delivery.routes.delivery_routes import router as delivery_router
from modules.settings.routes.settings_routes import router as settings_router

# ========== Real-time ==========
from modules.realtime.routes.websocket_routes import router as websocket_router
from modules.realtime.websocket.connection_manager import connection_manager

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.restaurant_name} Ordering API",
    description="""
    Restaurant ordering backend: dine-in and delivery orders, table
    sessions, kitchen status updates and a real-time dashboard channel.

    ## Real-time events

    Connect to `/ws` to receive `newOrder`, `orderStatusUpdated`,
    `orderDeleted`, `tableOccupied`, `tableStatusUpdate`, `tableCleared`,
    `tableCacheCleared`, `paymentInitiated`, `paymentCompleted` and
    `settingsUpdated`.
    """,
    version="1.0.0",
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ========== Include all routers ==========
app.include_router(order_router, prefix="/api")
app.include_router(table_router, prefix="/api")
app.include_router(cart_draft_router, prefix="/api")
app.include_router(customer_router, prefix="/api")
app.include_router(delivery_router, prefix="/api")
app.include_router(settings_router, prefix="/api")
app.include_router(websocket_router)


@app.get("/health", tags=["Health"])
async def health_check():
    health = {
        "status": "ok",
        "environment": settings.environment,
        "websocket_clients": connection_manager.connection_count,
    }
    if settings.log_sql_queries:
        health["query_stats"] = query_logger_instance.snapshot()
    return health


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup"""
    passed, warnings = run_startup_checks()
    if not passed:
        logger.error("Startup checks failed, requests may fail until resolved")

    if settings.is_development:
        await prepare_development_database()

    cart_draft_sweep_scheduler.start()
    logger.info(f"{settings.restaurant_name} API started ({settings.environment})")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown"""
    cart_draft_sweep_scheduler.stop()
    logger.info("API shut down")
