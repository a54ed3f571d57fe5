"""FastAPI application for the D818 ordering API.

This package provides REST endpoints for:
- Health checks
- Stripe Checkout creation and verification
- The Stripe payment webhook
- Order notifications
- Password reset (placeholder)

One Lambda function behind API Gateway serves every route through Mangum.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from ordering.utils.logging import configure_logging
from ordering_api.exceptions import register_exception_handlers
from ordering_api.middleware.correlation import CorrelationIdMiddleware
from ordering_api.routes import checkout_router, orders_router, password_router, stripe_router

configure_logging()

app = FastAPI(
    title="D818 Ordering API",
    description="REST API for checkout, payment confirmation and order notifications",
    version="0.1.0",
)

# The storefront is served from several origins (preview deployments)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.add_middleware(CorrelationIdMiddleware)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

# Include routers under /api prefix
# This matches CloudFront routing: /api/* → API Gateway
app.include_router(checkout_router, prefix="/api")
app.include_router(stripe_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
app.include_router(password_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Root health check endpoint at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "ordering-api",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "ordering_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["backend/api/src", "backend/shared/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
