from pydantic import BaseModel, EmailStr, Field
from portal.modules.users.schemas import UserProfile


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    name: str
    role_name: str = Field(alias="roleName")
    department_name: str = Field(alias="departmentName")

    class Config:
        populate_by_name = True


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    message: str
    user: UserProfile
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user: UserProfile


class MessageResponse(BaseModel):
    message: str
