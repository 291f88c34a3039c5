"""
Enquiry Desk - API
==================
FastAPI application for enquiry leads, orders, stock and WhatsApp
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .core.config import Settings, settings as default_settings
from .core.errors import EnquiryDeskError, RecordNotFound
from .db.database import create_engine, create_session_factory, init_db
from .integrations.whatsapp import WhatsAppClient
from .routers import compliance as compliance_router
from .routers import customers as customers_router
from .routers import leads as leads_router
from .routers import orders as orders_router
from .routers import pos as pos_router
from .routers import reports as reports_router
from .routers import stock as stock_router
from .routers import whatsapp as whatsapp_router
from .sales.counter import PosCounter
from .sales.inventory import InventoryService
from .sales.licences import LicenceRegister
from .sales.pipeline import SalesPipeline
from .sales.sql_store import SqlLeadStore, SqlOrderStore
from .sales.store import InMemoryLeadStore, InMemoryOrderStore

logger = logging.getLogger(__name__)


def describe_validation_error(exc: RequestValidationError) -> str:
    """First problem in a rejected request body, as one readable line"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"Invalid request: {field}: {message}" if field else f"Invalid request: {message}"


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        if settings.STORE_BACKEND == "sql":
            engine = create_engine(settings)
            await init_db(engine)
            session_factory = create_session_factory(engine)
            app.state.pipeline = SalesPipeline(SqlLeadStore(session_factory), SqlOrderStore(session_factory))
        logger.info("Using %s store", settings.STORE_BACKEND)

        yield

        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="Enquiry Desk",
        description="Lead pipeline and order back office for enquiry-based sales",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.pipeline = SalesPipeline(InMemoryLeadStore(), InMemoryOrderStore())
    app.state.inventory = InventoryService()
    if settings.SEED_SAMPLE_STOCK:
        app.state.inventory.seed()
    app.state.licences = LicenceRegister()
    if settings.SEED_SAMPLE_LICENCES:
        app.state.licences.seed()
    app.state.counter = PosCounter()
    app.state.whatsapp = WhatsAppClient(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EnquiryDeskError)
    async def enquiry_desk_error(request: Request, exc: EnquiryDeskError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RecordNotFound)
    async def record_not_found(request: Request, exc: RecordNotFound):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": describe_validation_error(exc)})

    @app.get("/")
    async def root():
        return {
            "service": "Enquiry Desk",
            "version": __version__,
            "status": "running",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {"status": "healthy"}

    app.include_router(leads_router.router)
    app.include_router(orders_router.router)
    app.include_router(reports_router.router)
    app.include_router(stock_router.router)
    app.include_router(whatsapp_router.router)
    app.include_router(compliance_router.router)
    app.include_router(pos_router.router)
    app.include_router(customers_router.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
