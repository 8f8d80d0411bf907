from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import time
from src.api.routes import router
from src.core.config import settings
from src.core.errors import TicketServiceError
from src.core.logging import logger, setup_logging
from src.db.memory import TicketStore

setup_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_TITLE)
app.state.store = TicketStore()

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    if process_time > settings.SLOW_REQUEST_SECONDS:
        logger.warning(f"Slow request: {request.method} {request.url.path} took {process_time:.2f}s")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.4f}s)")
    return response

@app.exception_handler(TicketServiceError)
async def ticket_service_error_handler(request: Request, exc: TicketServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

app.include_router(router)

@app.get("/health")
async def health_check():
    return {"status": "ok"}
