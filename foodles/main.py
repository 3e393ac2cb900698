"""
FastAPI Application Entry Point

Foodles ordering backend: payment verification, order notifications and
live restaurant status. Supports both Mock services (development) and
Real APIs (staging/production).

Endpoints:
    - POST /payment/verify-payment: Verify checkout signature, notify in background
    - GET /payment/{payment_id}: Look up a payment at the gateway
    - GET /email-status/{order_id}: Poll notification outcome
    - GET /api/restaurants/status[/{id}]: Cached open/closed status
    - WS /ws/restaurant-status: Live status changes
    - POST /contact: Send an order-confirmation email directly
    - POST /vendor/send-sms: Text a vendor about a new order
    - POST /api/log-restaurant-selection: Log a menu selection
    - GET /health: System health check
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from contextlib import asynccontextmanager

import uvicorn
from fastapi import (
    BackgroundTasks,
    Depends,
    FastAPI,
    HTTPException,
    Query,
    Request,
    WebSocket,
    WebSocketDisconnect,
)
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from foodles.core.config import get_settings, setup_logging
from foodles.schemas import (
    ContactRequest,
    EmailStatusResponse,
    ErrorResponse,
    HealthResponse,
    PaymentLookupResponse,
    RestaurantSelectionLog,
    RestaurantStatusBatchResponse,
    RestaurantStatusResponse,
    VendorSmsRequest,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from foodles.services.notifications import (
    BaseMailService,
    BaseTelephonyService,
    CustomerEmailChannel,
    get_mail_service,
    get_telephony_service,
    normalize_phone_number,
)
from foodles.services.orders import (
    NotificationStatusStore,
    OrderNotificationJob,
    get_status_store,
)
from foodles.services.orders.notifier import OrderNotifier, get_order_notifier
from foodles.services.payment import BasePaymentService, get_payment_service
from foodles.services.restaurants import (
    Broadcaster,
    RestaurantStatusCache,
    RestaurantStatusMonitor,
    WebSocketSubscriber,
    get_broadcaster,
    get_status_cache,
    get_status_monitor,
)

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

VENDOR_SMS_TEMPLATE = (
    "You have a new order! Order ID: {order_id}. "
    "Reply 'ACCEPT' to confirm or 'DECLINE' to reject."
)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # Log service configuration
    payment_service = get_payment_service()
    mail_service = get_mail_service()
    telephony_service = get_telephony_service()
    logger.info(f"✅ Payment Service: {payment_service.provider_name}")
    logger.info(f"✅ Mail Service: {mail_service.provider_name}")
    logger.info(f"✅ Telephony Service: {telephony_service.provider_name}")

    configured = telephony_service.configured_restaurants
    for restaurant_id in settings.tracked_restaurant_ids_list:
        if restaurant_id in configured:
            logger.info(f"   Restaurant {restaurant_id}: ✓ telephony configured")
        else:
            logger.warning(f"   Restaurant {restaurant_id}: ⚠️ telephony not configured")

    # Validate production config
    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    monitor = get_status_monitor()
    monitor.start()

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await monitor.stop()
    get_status_store().clear()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Ordering backend for Foodles: verifies Razorpay checkouts, notifies "
        "customers and restaurants, and serves live restaurant status."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍛 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    payment_service: BasePaymentService = Depends(get_payment_service),
    mail_service: BaseMailService = Depends(get_mail_service),
    telephony_service: BaseTelephonyService = Depends(get_telephony_service),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> HealthResponse:
    """Verify all providers are reachable."""
    checks = {
        "payment": await payment_service.health_check(),
        "mail": await mail_service.health_check(),
        "telephony": await telephony_service.health_check(),
    }
    for name, healthy in checks.items():
        if not healthy:
            logger.error(f"Health check failed: {name}")

    def describe(provider: str, healthy: bool) -> str:
        return f"{provider} (healthy)" if healthy else f"{provider} (unhealthy)"

    return HealthResponse(
        status="operational" if all(checks.values()) else "degraded",
        environment=settings.env_mode.value,
        payment_service=describe(payment_service.provider_name, checks["payment"]),
        mail_service=describe(mail_service.provider_name, checks["mail"]),
        telephony_service=describe(telephony_service.provider_name, checks["telephony"]),
        telephony_restaurants=telephony_service.configured_restaurants,
        status_subscribers=len(broadcaster),
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# PAYMENT ENDPOINTS
# =============================================================================

@app.post(
    "/payment/verify-payment",
    response_model=VerifyPaymentResponse,
    response_model_exclude_none=True,
    tags=["Payment"],
    summary="Verify Checkout Signature",
)
async def verify_payment(
    payload: VerifyPaymentRequest,
    background_tasks: BackgroundTasks,
    payment_service: BasePaymentService = Depends(get_payment_service),
    notifier: OrderNotifier = Depends(get_order_notifier),
) -> VerifyPaymentResponse:
    """
    Verify the Razorpay checkout signature for an order.

    On success the customer/vendor notifications are queued and run after
    the response is sent; their outcome is exposed through
    GET /email-status/{order_id}. A bad signature is answered with
    ``{"verified": false}`` and triggers nothing.
    """
    verified = payment_service.verify_signature(
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    )

    if not verified:
        logger.warning(
            f"❌ Signature mismatch for order {payload.order_id} "
            f"(payment {payload.razorpay_payment_id})"
        )
        return VerifyPaymentResponse(verified=False)

    logger.info(f"✅ Payment verified for order {payload.order_id}")

    job = payload.to_job()
    background_tasks.add_task(notifier.notify, job)

    return VerifyPaymentResponse(
        verified=True,
        order_id=job.order_id,
        vendor_notified=bool(job.vendor_email),
    )


@app.get(
    "/payment/{payment_id}",
    response_model=PaymentLookupResponse,
    response_model_exclude_none=True,
    responses={502: {"model": ErrorResponse}},
    tags=["Payment"],
    summary="Look Up Payment",
)
async def get_payment(
    payment_id: str,
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> PaymentLookupResponse:
    """Fetch a payment from the gateway and report whether it was captured."""
    details = await payment_service.fetch_payment(payment_id)

    if not details.success:
        raise HTTPException(
            status_code=502,
            detail=details.error_message or "Payment lookup failed",
        )

    if not details.is_captured:
        return PaymentLookupResponse(status="failed", message="Payment not captured")

    return PaymentLookupResponse.model_validate({
        "status": "captured",
        "paymentDetails": details.to_dict(),
    })


# =============================================================================
# NOTIFICATION ENDPOINTS
# =============================================================================

@app.get(
    "/email-status/{order_id}",
    response_model=EmailStatusResponse,
    tags=["Notifications"],
    summary="Poll Notification Outcome",
)
async def get_email_status(
    order_id: str,
    store: NotificationStatusStore = Depends(get_status_store),
) -> EmailStatusResponse:
    """
    Current notification outcome for an order.

    Unknown and expired orders read as the zeroed default.
    """
    return EmailStatusResponse.from_outcome(store.read(order_id))


@app.post(
    "/contact",
    tags=["Notifications"],
    summary="Send Order Confirmation Email",
)
async def send_contact_email(
    payload: ContactRequest,
    mail_service: BaseMailService = Depends(get_mail_service),
) -> JSONResponse:
    """Send the customer order-confirmation email right away."""
    if not payload.name or not payload.receiver_email or not payload.order_details:
        return JSONResponse(
            status_code=400,
            content={"status": "ERROR", "message": "Missing required fields"},
        )

    job = OrderNotificationJob(
        order_id=str(payload.order_details.get("orderId", "")),
        customer_name=payload.name,
        customer_email=payload.receiver_email,
        order_details=payload.order_details,
    )
    result = await CustomerEmailChannel(mail_service).deliver(payload.receiver_email, job)

    if not result.success:
        logger.error(f"Contact email to {payload.receiver_email} failed: {result.error_message}")
        return JSONResponse(
            status_code=500,
            content={"status": "ERROR", "message": result.error_message or "Failed to send email"},
        )

    return JSONResponse(content={"status": "Message Sent"})


@app.post(
    "/vendor/send-sms",
    tags=["Notifications"],
    summary="Text Vendor About New Order",
)
async def send_vendor_sms(
    payload: VendorSmsRequest,
    telephony_service: BaseTelephonyService = Depends(get_telephony_service),
) -> JSONResponse:
    """Send the new-order SMS through the restaurant's telephony account."""
    phone = normalize_phone_number(payload.vendor_phone_number, settings.phone_country_code)
    if not phone:
        return JSONResponse(status_code=400, content={"error": "Invalid phone number"})

    if not telephony_service.is_configured(payload.restaurant_id):
        logger.error(f"❌ No telephony configuration found for restaurant: {payload.restaurant_id}")
        return JSONResponse(
            status_code=400,
            content={"error": f"Telephony not configured for restaurant {payload.restaurant_id}"},
        )

    result = await telephony_service.send_sms(
        phone,
        VENDOR_SMS_TEMPLATE.format(order_id=payload.order_id),
        payload.restaurant_id,
    )

    if not result.success:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to send SMS", "detail": result.error_message},
        )

    return JSONResponse(content={"message": "SMS sent successfully", "sid": result.message_id})


# =============================================================================
# RESTAURANT STATUS ENDPOINTS
# =============================================================================

@app.get(
    "/api/restaurants/status",
    response_model=RestaurantStatusBatchResponse,
    tags=["Restaurants"],
    summary="Batch Restaurant Status",
)
async def get_restaurant_statuses(
    ids: Optional[str] = Query(None, description="Comma-separated restaurant ids"),
    cache: RestaurantStatusCache = Depends(get_status_cache),
) -> RestaurantStatusBatchResponse:
    """Open/closed status for several restaurants, served from a short-lived cache."""
    restaurant_ids = (
        [r.strip() for r in ids.split(",") if r.strip()]
        if ids
        else settings.tracked_restaurant_ids_list
    )
    batch = await cache.get_all_statuses(restaurant_ids)
    return RestaurantStatusBatchResponse.from_batch(batch)


@app.get(
    "/api/restaurants/status/{restaurant_id}",
    response_model=RestaurantStatusResponse,
    tags=["Restaurants"],
    summary="Restaurant Status",
)
async def get_restaurant_status(
    restaurant_id: str,
    cache: RestaurantStatusCache = Depends(get_status_cache),
) -> RestaurantStatusResponse:
    return RestaurantStatusResponse.from_status(await cache.get_status(restaurant_id))


@app.post(
    "/api/log-restaurant-selection",
    tags=["Restaurants"],
    summary="Log Restaurant Selection",
)
async def log_restaurant_selection(payload: RestaurantSelectionLog) -> dict[str, Any]:
    logger.info(
        f"Restaurant selected: {payload.restaurant_name or '?'} "
        f"(id={payload.restaurant_id}, at={payload.timestamp or 'n/a'})"
    )
    return {"success": True}


@app.websocket("/ws/restaurant-status")
async def restaurant_status_socket(
    websocket: WebSocket,
    monitor: RestaurantStatusMonitor = Depends(get_status_monitor),
) -> None:
    """
    Live restaurant status.

    Sends an ``initial_status`` snapshot on connect, then a
    ``status_change`` message whenever a restaurant opens or closes.
    """
    await websocket.accept()
    subscriber = WebSocketSubscriber(websocket)
    await monitor.subscribe(subscriber)
    try:
        while True:
            # Inbound messages are ignored; receiving detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        monitor.unsubscribe(subscriber)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    uvicorn.run(
        "foodles.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
