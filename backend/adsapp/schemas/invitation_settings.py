import re
import uuid
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

DOMAIN_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)+$"

def _normalize_domains(domains: Optional[List[str]]) -> Optional[List[str]]:
    if domains is None:
        return None
    cleaned = []
    for domain in domains:
        domain = domain.strip().lower().lstrip("@")
        if domain and domain not in cleaned:
            cleaned.append(domain)
    return cleaned

# Effective settings of one organization (stored row or global defaults)
class InvitationSettings(BaseModel):
    organization_id: uuid.UUID
    default_expiration_days: int
    max_reminders: int
    reminder_interval_days: int
    auto_reminders: bool
    allowed_domains: List[str] = []
    restricted_domains: List[str] = []

    model_config = ConfigDict(from_attributes=True)

# Partial update; omitted fields keep their current value
class InvitationSettingsUpdate(BaseModel):
    default_expiration_days: Optional[int] = Field(default=None, ge=1, le=90)
    max_reminders: Optional[int] = Field(default=None, ge=0, le=10)
    reminder_interval_days: Optional[int] = Field(default=None, ge=1, le=30)
    auto_reminders: Optional[bool] = None
    allowed_domains: Optional[List[str]] = Field(default=None, max_length=100)
    restricted_domains: Optional[List[str]] = Field(default=None, max_length=100)

    @field_validator("allowed_domains", "restricted_domains")
    @classmethod
    def normalize_domains(cls, value):
        value = _normalize_domains(value)
        for domain in value or []:
            if not re.match(DOMAIN_PATTERN, domain):
                raise ValueError(f"Invalid domain: {domain}")
        return value
