import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from noticeboard import models  # noqa: F401  registers every table on Base.metadata
from noticeboard.config import settings
from noticeboard.core.logging_config import configure_logging
from noticeboard.database.base import Base
from noticeboard.database.session import engine
from noticeboard.routes import admin, auth, notices, notifications

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Notice Board API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)


def _format_validation_messages(exc: RequestValidationError) -> list[str]:
    messages: list[str] = []
    for err in exc.errors():
        loc = [str(v) for v in err.get("loc", []) if str(v) not in {"body", "query", "path"}]
        field = ".".join(loc) if loc else "field"
        err_type = str(err.get("type", ""))
        message = str(err.get("msg", "Invalid value"))

        if err_type in {"missing", "value_error.missing"}:
            messages.append(f"{field} is required")
        elif err_type == "value_error":
            # messages raised by our own validators are already user facing
            messages.append(message.removeprefix("Value error, "))
        elif "string_too_short" in err_type:
            messages.append(f"{field} cannot be empty")
        elif err_type == "json_invalid":
            messages.append("Invalid JSON body")
        elif field:
            messages.append(f"{field}: {message}")
        else:
            messages.append(message)

    # Preserve order while de-duplicating.
    return list(dict.fromkeys(messages))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = _format_validation_messages(exc)
    return JSONResponse(
        status_code=400,
        content={"error": messages[0] if messages else "Invalid request"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(auth.router)
app.include_router(notices.router)
app.include_router(admin.router)
app.include_router(notifications.router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "noticeboard.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
    )
