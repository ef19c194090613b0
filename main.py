"""
Main FastAPI application.
Authentication screen service: sign-in/sign-up form and Google Sign-In.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
from app.config import settings
from app.logging_config import get_logger
from app.routers import auth
from app.services.form import FormRegistry
from app.services.google_oauth import GoogleSignInProvider
from app.services.sign_in import SignInCoordinator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the application.
    Builds the form registry and the sign-in provider on startup.
    """
    provider = GoogleSignInProvider.from_settings(settings)
    app.state.form_registry = FormRegistry()
    app.state.sign_in_provider = provider
    app.state.sign_in_coordinator = SignInCoordinator(provider)
    get_logger().info("startup", provider=provider.name, scopes=provider.scopes)
    yield


# Create FastAPI application
app = FastAPI(
    title="Auth Screen API",
    description="""
    Backend for an authentication screen with email/password and Google Sign-In.

    ## Form
    - `GET /auth/form` returns the fields to render for the current mode
    - `PATCH /auth/form` updates field contents
    - `POST /auth/form/toggle` switches between sign-in and sign-up
    - `POST /auth/form/submit` validates and returns a notification

    ## Google Sign-In
    - Start at `/auth/google`; Google redirects back to `/auth/google/callback`
    - Cancelling on the consent screen is not an error
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add session middleware FIRST (middleware applied in reverse order)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie="session",
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=False,
)

# Configure CORS AFTER session middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(auth.router)


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information and available endpoints.
    """
    return {
        "message": "Auth Screen Service",
        "version": "1.0.0",
        "documentation": "/docs",
        "endpoints": {
            "form": {
                "view": "GET /auth/form",
                "update": "PATCH /auth/form",
                "toggle": "POST /auth/form/toggle",
                "submit": "POST /auth/form/submit",
            },
            "google_sign_in": {
                "start": "GET /auth/google",
                "callback": "GET /auth/google/callback",
                "account": "GET /auth/google/account",
                "sign_out": "POST /auth/google/sign-out",
            },
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    """
    return {"status": "healthy", "service": "Auth Screen Service"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
