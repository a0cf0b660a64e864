from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from authglue.core.config import Settings, app_logger, get_settings
from authglue.core.exceptions.handlers import (
    authentication_exception_handler,
    bad_request_exception_handler,
    exception_schema,
    forbidden_exception_handler,
    general_exception_handler,
    not_found_exception_handler,
    oauth_exception_handler,
)
from authglue.core.exceptions.types import (
    AppException,
    AuthenticationException,
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    OAuthException,
)
from authglue.core.logger import init_sentry
from authglue.core.routers import auth_router
from authglue.core.schemas.oauth import HealthResponse
from authglue.core.services import (
    LoginOrchestrator,
    SessionIssuer,
    StateCookieCodec,
    build_provider_registry,
    ensure_csprng_available,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info("Starting application...")
    orchestrator: LoginOrchestrator = app.state.login_orchestrator

    # Initialize OAuth services
    app_logger.info("Initializing OAuth services...")
    for adapter in orchestrator.providers.values():
        await adapter.init()
    app_logger.info(
        f"OAuth services initialized: {sorted(orchestrator.providers) or 'none'}"
    )

    yield

    app_logger.info("Shutting down application...")

    # Close OAuth services
    app_logger.info("Closing OAuth services...")
    await orchestrator.aclose()
    app_logger.info("OAuth services closed successfully.")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application from a fully validated configuration.

    Everything that can make the service unsafe to run is checked here,
    before any request is served: the randomness source and the session
    signing secret.

    Args:
        settings: Configuration to use. Defaults to ``get_settings()``.

    Returns:
        FastAPI: The configured application.

    Raises:
        MissingSigningSecretException: If SESSION_SECRET_KEY is empty.
        RuntimeError: If no cryptographically secure random source exists.
    """
    settings = settings or get_settings()

    ensure_csprng_available()

    session_issuer = SessionIssuer(
        secret=settings.SESSION_SECRET_KEY,
        algorithm=settings.SESSION_ALGORITHM,
        ttl=timedelta(days=settings.SESSION_TTL_DAYS),
    )
    state_codec = StateCookieCodec(
        secret_key=settings.SESSION_SECRET_KEY,
        max_age_seconds=settings.STATE_TTL_SECONDS,
    )
    providers = build_provider_registry(settings)
    orchestrator = LoginOrchestrator(
        providers=providers,
        issuer=session_issuer,
        state_codec=state_codec,
    )

    if not settings.DEBUG:
        init_sentry(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        )

    app = FastAPI(
        lifespan=lifespan,
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        debug=settings.DEBUG,
        openapi_url="/openapi.json",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
        responses=exception_schema,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.session_issuer = session_issuer
    app.state.login_orchestrator = orchestrator

    # Handlers are matched on the exception's MRO, most specific first
    app.add_exception_handler(ForbiddenException, forbidden_exception_handler)
    app.add_exception_handler(OAuthException, oauth_exception_handler)
    app.add_exception_handler(AuthenticationException, authentication_exception_handler)
    app.add_exception_handler(NotFoundException, not_found_exception_handler)
    app.add_exception_handler(BadRequestException, bad_request_exception_handler)
    # Generic fallback
    app.add_exception_handler(AppException, general_exception_handler)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    @app.head("/health", include_in_schema=False)
    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Liveness check listing the login providers that are enabled."""
        login_orchestrator: LoginOrchestrator = request.app.state.login_orchestrator
        return HealthResponse(
            status="ok",
            providers=sorted(login_orchestrator.providers),
            version=settings.APP_VERSION,
        )

    app_logger.info(
        f"Application configured: environment={settings.ENVIRONMENT}, "
        f"base_url={settings.BASE_URL}"
    )
    return app


app = create_app()
