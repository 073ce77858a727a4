import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routes.clips import router as clips_router
from services.errors import ClipRenderError, ValidationError

load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="CaptionCast API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(clips_router, prefix="/api")


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(ClipRenderError)
async def clip_render_error_handler(request: Request, exc: ClipRenderError) -> JSONResponse:
    logger.warning("[api] %s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await clip_render_error_handler(request, ValidationError(_describe_validation_errors(exc)))


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def run(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Serve the API with uvicorn (`captioncast-api` console script)."""
    import uvicorn

    logger.info("[api] Starting CaptionCast API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
