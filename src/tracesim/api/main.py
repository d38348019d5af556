import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from tracesim.api.simulate import router as simulate_router
from tracesim.container import Container
from tracesim.exceptions import (
    AbiDecodeError,
    ExternalServiceError,
    TraceInterpretationError,
    TraceUnavailableError,
)

logger = logging.getLogger("tracesim.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    logging.basicConfig(level=container.settings().log_level)
    yield
    await container.http_client().close()


app = FastAPI(title="tracesim", version="0.1.0", lifespan=lifespan)


@app.exception_handler(TraceInterpretationError)
async def interpretation_error_handler(request: Request, exc: TraceInterpretationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "failures": [str(f) for f in exc.failures]},
    )


@app.exception_handler(AbiDecodeError)
async def decode_error_handler(request: Request, exc: AbiDecodeError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def trace_shape_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": f"Malformed trace: {exc.error_count()} error(s)"})


@app.exception_handler(TraceUnavailableError)
async def trace_unavailable_handler(request: Request, exc: TraceUnavailableError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(ExternalServiceError)
async def external_service_handler(request: Request, exc: ExternalServiceError):
    logger.warning("RPC failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.include_router(simulate_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
