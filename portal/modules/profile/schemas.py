from pydantic import BaseModel, Field
from typing import Optional
from portal.modules.users.schemas import ProfileSummary

THEMES = ("dark", "light")


class NameUpdate(BaseModel):
    name: Optional[str] = None


class PasswordUpdate(BaseModel):
    new_password: Optional[str] = Field(None, alias="newPassword")

    class Config:
        populate_by_name = True


class PreferencesUpdate(BaseModel):
    theme: Optional[str] = None


class ProfileResponse(BaseModel):
    user: ProfileSummary


class SuccessResponse(BaseModel):
    success: bool = True
