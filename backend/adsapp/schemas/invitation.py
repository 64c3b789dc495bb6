import uuid
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, EmailStr, ConfigDict, Field

# Properties to receive on creation. Owners are never invited.
class InvitationCreate(BaseModel):
    email: EmailStr
    role: Literal["admin", "member"] = "member"

class InvitationAccept(BaseModel):
    token: str

# This is the schema for listing invitations. It never includes the token,
# which only travels inside the emailed acceptance link.
class Invitation(BaseModel):
    id: uuid.UUID
    organization_id: uuid.UUID
    email: str
    role: str
    status: str
    invited_by: uuid.UUID
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    accepted_by: Optional[uuid.UUID] = None
    reminders_sent: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class InvitationAcceptResponse(BaseModel):
    organization_id: uuid.UUID
    profile_id: uuid.UUID
    role: str
    invitation_id: uuid.UUID

# One line of a bulk request. Emails are validated per entry by the service,
# so a single bad address does not reject the whole batch.
class InvitationBulkEntry(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    role: str = "member"

class InvitationBulkCreate(BaseModel):
    invitations: List[InvitationBulkEntry] = Field(min_length=1)

class BulkInvitationItemResult(BaseModel):
    email: str
    success: bool
    invitation_id: Optional[uuid.UUID] = None
    error_type: Optional[str] = None
    error: Optional[str] = None

class BulkInvitationResult(BaseModel):
    total_invitations: int
    successful_invitations: int
    failed_invitations: int
    results: List[BulkInvitationItemResult]
