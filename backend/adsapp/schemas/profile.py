import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict

# The authenticated caller as reported by Supabase Auth. Not every identity
# has a profile yet (e.g. someone accepting their first invitation).
class CurrentIdentity(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str | None = None

# Base properties
class ProfileBase(BaseModel):
    email: str
    full_name: str | None = None

# Properties stored in DB
class ProfileInDB(ProfileBase):
    id: uuid.UUID
    organization_id: uuid.UUID
    role: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

# Properties to return to client
class Profile(ProfileInDB):
    pass
