import uuid
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from .license import LicenseUsage

# Base properties
class OrganizationBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)

# Properties to receive on creation
class OrganizationCreate(OrganizationBase):
    slug: str = Field(pattern=r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

# Properties stored in DB. WhatsApp credentials are deliberately absent.
class OrganizationInDB(OrganizationBase):
    id: uuid.UUID
    slug: str
    max_team_members: int
    used_team_members: int
    subscription_tier: str
    subscription_status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

# Properties to return to client
class Organization(OrganizationInDB):
    pass

class OrganizationWithLicenses(Organization):
    licenses: LicenseUsage
