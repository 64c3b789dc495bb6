import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from adsapp.api.v1.endpoints import users, organizations, invitations, invitation_settings, members, licenses, internal
from adsapp.core.async_context import close_async_context
from adsapp.core.config import settings
from adsapp.core.errors import register_exception_handlers


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_async_context()


app = FastAPI(
    title="ADSapp API",
    description="Team membership, invitations and license seats for ADSapp organizations.",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(organizations.router, prefix="/api/v1/organizations", tags=["Organizations"])
app.include_router(invitations.router, prefix="/api/v1/invitations", tags=["Invitations"])
app.include_router(invitation_settings.router, prefix="/api/v1/invitation-settings", tags=["Invitation Settings"])
app.include_router(members.router, prefix="/api/v1/members", tags=["Members"])
app.include_router(licenses.router, prefix="/api/v1/licenses", tags=["Licenses"])

# Scheduler-facing APIs, protected by the internal shared secret
app.include_router(internal.router, prefix="/internal", tags=["Internal"])


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok"}
