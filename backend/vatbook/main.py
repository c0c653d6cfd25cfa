from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vatbook.config import Settings
from vatbook.core.exceptions import register_exception_handlers
from vatbook.database import Base, build_engine, build_session_factory
from vatbook.tax.reporting import StubTaxAuthority

# Import all models so Base.metadata knows about them
import vatbook.auth.models  # noqa: F401
import vatbook.invoicing.models  # noqa: F401


@asynccontextmanager
async def lifespan(application: FastAPI):
    settings = application.state.settings

    if settings.is_sqlite and ":memory:" not in settings.database_url:
        db_path = settings.database_url.split("///")[-1]
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = build_engine(settings.database_url)

    # Auto-create tables for SQLite in development
    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    application.state.engine = engine
    application.state.session_factory = build_session_factory(engine)
    application.state.http_client = httpx.AsyncClient(timeout=settings.vies_timeout_seconds)
    if not hasattr(application.state, "tax_authority"):
        application.state.tax_authority = StubTaxAuthority(settings.tax_authority_base_url)

    yield

    await application.state.http_client.aclose()
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = Settings()

    fastapi_app = FastAPI(
        title="vatbook",
        description="Invoicing and Belgian VAT reporting",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.settings = settings

    # CORS
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    from vatbook.auth.router import router as auth_router
    from vatbook.invoicing.router import router as invoicing_router
    from vatbook.tax.router import router as tax_router

    fastapi_app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    fastapi_app.include_router(invoicing_router, prefix="/api/invoices", tags=["invoices"])
    fastapi_app.include_router(tax_router, prefix="/api/tax", tags=["tax"])

    register_exception_handlers(fastapi_app)

    # System endpoints
    @fastapi_app.get("/api/system/health")
    async def health():
        return {"data": {"status": "healthy"}}

    return fastapi_app


app = create_app()
