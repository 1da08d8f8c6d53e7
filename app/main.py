# app/main.py
import logging
import os
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.modules.router import router as modules_router
from core.config import settings, wire_services
from core.logging import get_logger

logger = get_logger(__name__)


def create_app():
    app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0")
    wire_services(app)
    app.include_router(modules_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.1f} ms)")
        return response

    @app.on_event("shutdown")
    async def close_http_client():
        await app.state.http_client.aclose()
        logger.info("Shared HTTP client closed")

    # --- CORS (the onboarding UI is served separately) ---
    allow_origins = os.getenv("CORS_ALLOW_ORIGINS")
    origins = (
        [o.strip() for o in allow_origins.split(",") if o.strip()]
        if allow_origins
        else settings.CORS_ALLOWED_ORIGINS
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )

    @app.api_route("/healthz", methods=["GET", "HEAD"], include_in_schema=False)
    async def healthz():
        return JSONResponse({"status": "ok"})

    for route in app.routes:
        methods = getattr(route, "methods", None)
        if methods:
            logging.getLogger("router.map").debug("ROUTE %s %s", ",".join(sorted(methods)), route.path)

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port)
