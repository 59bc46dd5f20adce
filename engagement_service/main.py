from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time
from typing import Optional

from opentelemetry.trace import get_current_span

from engagement_service.core.config import settings
from engagement_service.core.db import dispose_engine, init_engine_and_session
from engagement_service.core.logging_config import configure_logging
from engagement_service.core.rate_limit import configure_rate_limiting
from engagement_service.api.routes.engagement_logs import router as engagement_logs_router
from engagement_service.api.routes.health import router as health_router
from engagement_service.utils.envelopes import api_success, api_error
from engagement_service.utils.exceptions import AppException


configure_logging()

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, debug=settings.DEBUG)

# Telemetry / Azure Monitor (optional)
_logger = logging.getLogger("engagement.api")
try:
	if settings.ENABLE_APP_INSIGHTS and settings.AZURE_MONITOR_CONN_STR:
		from azure.monitor.opentelemetry import configure_azure_monitor
		from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
		from opentelemetry.instrumentation.logging import LoggingInstrumentor

		configure_azure_monitor(
			connection_string=settings.AZURE_MONITOR_CONN_STR,
			sampling_ratio=settings.SAMPLING_RATIO,
		)
		# Include trace/span ids in stdlib logging records
		LoggingInstrumentor().instrument(set_logging_format=True)
		FastAPIInstrumentor.instrument_app(app)
		_logger.info("Azure Monitor telemetry is enabled")
except Exception as telemetry_exc:
	# Do not block app startup if telemetry fails
	_logger.warning("Failed to initialize Azure Monitor telemetry: %s", telemetry_exc)

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.allowed_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

configure_rate_limiting(app)

# Normalize API prefix (must not end with '/')
_api_prefix = settings.API_PREFIX.rstrip("/")

app.include_router(health_router)
app.include_router(engagement_logs_router, prefix=_api_prefix)


def _current_trace_id() -> Optional[str]:
	_current_span = get_current_span()
	trace_id_int = _current_span.get_span_context().trace_id if _current_span else 0
	return f"{trace_id_int:032x}" if trace_id_int else None


# Structured request logging (includes trace correlation where available)
@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
	start_time = time.perf_counter()
	client_ip: Optional[str] = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None)
	user_agent: Optional[str] = request.headers.get("user-agent")
	status_code: Optional[int] = None
	try:
		response = await call_next(request)
		status_code = response.status_code
		return response
	except Exception:
		# Log here as well; handler below will also run
		_logger.exception(
			"Unhandled exception during request",
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"net.peer.ip": client_ip,
				"http.user_agent": user_agent,
				"trace_id": _current_trace_id(),
			},
		)
		raise
	finally:
		elapsed_ms = (time.perf_counter() - start_time) * 1000.0
		_logger.info(
			"HTTP request",
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"http.status_code": status_code,
				"http.duration_ms": round(elapsed_ms, 2),
				"net.peer.ip": client_ip,
				"http.user_agent": user_agent,
				"trace_id": _current_trace_id(),
			},
		)


@app.on_event("startup")
def on_startup() -> None:
	init_engine_and_session()


@app.on_event("shutdown")
async def on_shutdown() -> None:
	await dispose_engine()


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
	if exc.status_code >= 500:
		_logger.error("Application error %s on %s: %s", exc.code, request.url.path, exc.message)
	else:
		_logger.info("Client error %s on %s: %s", exc.code, request.url.path, exc.message)
	return JSONResponse(status_code=exc.status_code, content=api_error(code=exc.code, message=exc.message, details=exc.details))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
	errors = exc.errors()
	first = errors[0] if errors else {}
	location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
	message = f"Validation error: {location} {first.get('msg', 'is invalid')}".strip()
	details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")} for err in errors]
	return JSONResponse(status_code=400, content=api_error(code="VALIDATION_ERROR", message=message, details=details))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
	if exc.status_code == 404:
		return JSONResponse(status_code=404, content=api_error(code="NOT_FOUND", message=f"Route {request.url.path} not found"))
	return JSONResponse(status_code=exc.status_code, content=api_error(code=f"HTTP_{exc.status_code}", message=str(exc.detail)))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
	_logger.exception(
		"Unhandled exception",
		extra={
			"http.method": request.method,
			"http.route": request.url.path,
			"trace_id": _current_trace_id(),
		},
	)
	return JSONResponse(status_code=500, content=api_error(code="INTERNAL_SERVER_ERROR", message="An unexpected error occurred"))


@app.get("/")
async def root():
	return api_success(
		{
			"service": settings.APP_NAME,
			"version": settings.APP_VERSION,
			"status": "ok",
			"endpoints": {
				"engagement_logs": f"{_api_prefix}/engagement-logs",
				"health": f"{_api_prefix}/engagement-logs/health",
			},
		}
	)
