"""
Bank Ledger API Application Factory
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .accounts import router as accounts_router
from .customers import router as customers_router
from ..config import get_config
from ..errors import AccessDeniedError, InvalidArgumentError, NotFoundError
from ..logging_config import get_logger, log_action, setup_logging
from ..seed import seed_demo_data
from ..system import LedgerSystem


logger = get_logger("bank_ledger.api")

REQUEST_ID_HEADER = "X-Request-ID"


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", "Invalid request"))
        # pydantic prefixes validator messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(message)
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Map ledger errors to HTTP responses"""

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(AccessDeniedError)
    async def handle_access_denied(request: Request, exc: AccessDeniedError):
        # The reason stays in the logs; callers only learn that access was refused
        return Response(status_code=403)

    @app.exception_handler(InvalidArgumentError)
    async def handle_invalid_argument(request: Request, exc: InvalidArgumentError):
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})


def create_app(system: Optional[LedgerSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    owns_system = system is None
    if system is None:
        system = LedgerSystem()
    config = system.config

    setup_logging(level=config.log_level, fmt=config.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.seed_demo_data:
            seed_demo_data(system)
        logger.info("Bank ledger API started")
        yield
        if owns_system:
            system.close()

    app = FastAPI(
        title="Bank Ledger API",
        description="Customer accounts, deposits, withdrawals and transfers with overdraft limits",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.ledger_system = system

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Tag each request with an id, echoed back and used as the log correlation id"""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        log_action(
            logger, "info", f"{request.method} {request.url.path} {response.status_code}",
            action="http_request", resource=request.url.path, correlation_id=request_id,
            extra={"method": request.method, "status": response.status_code}
        )
        return response

    register_exception_handlers(app)

    # Include routers
    app.include_router(customers_router, prefix="/api", tags=["Customers"])
    app.include_router(accounts_router, prefix="/api/accounts", tags=["Accounts"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bank_ledger_api",
            "version": "1.0.0"
        }

    return app


# Run server function
def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "bank_ledger.api:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
