import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authgate.config import settings
from authgate.database import init_db
from authgate.errors import AuthError
from authgate.routers import auth, health, totp, users
from authgate.routers.errors import auth_error_handler
from authgate.services.users import user_store
from authgate.services.vault import vault

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)

app = FastAPI(title="AuthGate")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(AuthError, auth_error_handler)

app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(totp.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(auth.router)  # Compatibility for clients calling /auth/* without /api.
app.include_router(totp.router)


@app.on_event("startup")
def startup() -> None:
    init_db()
    vault.ensure_configured()
    if settings.seed_username and settings.seed_password:
        try:
            user_store.ensure_user(
                settings.seed_username,
                settings.seed_password,
                email=settings.seed_email or None,
            )
        except ValueError:
            LOGGER.warning("Could not seed account %s", settings.seed_username)


@app.get("/")
def root():
    return {"status": "Backend running"}
