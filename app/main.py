import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.routers import authors, posts
from app.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Case Studies CMS API", description="Post workflow and content API")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Validation failed for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": "VALIDATION_ERROR",
                "message": "Validation failed",
                "details": jsonable_errors(exc),
            }
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(posts.router)
app.include_router(authors.router)


@app.get("/")
async def root():
    return {"message": "Case Studies CMS API is running"}
