import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqladmin import Admin
from sqladmin.authentication import AuthenticationBackend
from starlette.middleware.sessions import SessionMiddleware

from academy.admin import ADMIN_VIEWS
from academy.api.v1.api import api_router
from academy.core.config import settings
from academy.core.security import verify_password
from academy.crud import user_crud
from academy.db import base  # noqa: F401  (enregistre tous les modèles)
from academy.db.base_class import Base
from academy.db.initial_data import init_db
from academy.db.session import SessionLocal, async_engine
from academy.models.user.user_model import UserRole

# --- Configuration du logging ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- Initialisation de l'application FastAPI ---
app = FastAPI(
    title="Academy API",
    openapi_url="/api/v1/openapi.json",
)


def _sanitize_origin(origin: str | None) -> str | None:
    if not origin:
        return None
    value = origin.strip()
    if not value:
        return None
    if not value.startswith("http"):
        value = f"https://{value}"
    return value.rstrip("/")


# --- Configuration des Middlewares ---
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

cors_origins = sorted({o for o in (_sanitize_origin(o) for o in settings.BACKEND_CORS_ORIGINS) if o})
logger.info("CORS origins configurés: %s", cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)


# --- Initialisation de l'Admin ---
class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        identifier = form.get("username")
        password = form.get("password")

        with SessionLocal() as db:
            user = user_crud.get_user_by_identifier(db, identifier or "")
            allowed = (
                user is not None
                and user.is_active
                and UserRole(user.role) == UserRole.ADMINISTRATEUR
                and verify_password(password, user.hashed_password)
            )
            if allowed:
                request.session.update({"token": "admin_logged_in", "user": user.email})
        return allowed

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return "token" in request.session


admin = Admin(
    app,
    async_engine,
    authentication_backend=AdminAuth(secret_key=settings.SECRET_KEY),
    base_url="/admin",
    title="Academy - Back office",
)
for view in ADMIN_VIEWS:
    admin.add_view(view)

app.include_router(api_router, prefix="/api/v1")


# --- Événement de Démarrage ---
@app.on_event("startup")
async def startup():
    logger.info("Vérification et création des tables de la base de données...")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Les tables de la base de données sont prêtes.")

    if settings.SEED_DEMO_DATA:
        with SessionLocal() as session:
            init_db(session)


# --- Route Racine ---
@app.get("/")
def read_root():
    return {"message": "Welcome to Academy API!"}
