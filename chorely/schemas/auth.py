"""Identity schemas."""

from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: str
    name: Optional[str]
    display_name: Optional[str]
    family_role: Optional[str]
    family_id: Optional[str]
    account_kind: str
