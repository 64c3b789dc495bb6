from pydantic import BaseModel

class LicenseUsage(BaseModel):
    available_seats: int
    max_seats: int
    used_seats: int
    can_invite: bool
