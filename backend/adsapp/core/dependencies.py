import logging
import secrets

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.core.async_context import get_async_context
from adsapp.core.config import settings
from adsapp.core.exceptions import AuthorizationError
from adsapp.database import get_db
from adsapp.models.profile import Profile
from adsapp.schemas.profile import CurrentIdentity
from adsapp.services import membership_service

logger = logging.getLogger(__name__)

# Bearer JWT issued by Supabase Auth. The tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/v1/token")


async def get_current_identity(token: str = Depends(oauth2_scheme)) -> CurrentIdentity:
    """
    Resolves the caller through Supabase Auth. The identity may not have a
    profile yet, e.g. a user accepting their first invitation.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )

    try:
        supabase_client = await get_async_context().supabase_client()
        auth_response = await supabase_client.auth.get_user(token)
        auth_user = auth_response.user if auth_response else None
    except Exception as e:
        logger.warning("Auth error: %s", e)
        auth_user = None

    if not auth_user or not auth_user.email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    metadata = auth_user.user_metadata or {}
    return CurrentIdentity(id=auth_user.id, email=auth_user.email, full_name=metadata.get("full_name"))


async def get_current_profile(
    db: AsyncSession = Depends(get_db),
    identity: CurrentIdentity = Depends(get_current_identity),
) -> Profile:
    profile = await membership_service.get_profile(db, identity.id)
    if not profile or not profile.is_active:
        raise AuthorizationError("User profile not found in application. Please complete signup.")
    return profile


async def require_team_manager(profile: Profile = Depends(get_current_profile)) -> Profile:
    """Owners and admins of the caller's own organization."""
    if not profile.can_manage_team:
        raise AuthorizationError("Only owners and admins can manage the team")
    return profile


async def verify_internal_secret(x_internal_secret: str | None = Header(default=None)) -> None:
    """
    Guards internal endpoints called by the scheduler. An empty configured
    secret disables them entirely.
    """
    expected = settings.INTERNAL_API_SECRET
    if not expected or not x_internal_secret or not secrets.compare_digest(x_internal_secret, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid internal credentials",
        )
