"""
Authentication schemas
"""
from pydantic import BaseModel, Field
from leave_api.models.user import Role


class LoginRequest(BaseModel):
    """Login request schema"""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Token response schema"""
    access_token: str
    token_type: str = "bearer"
    role: Role
    active_role: Role


class SwitchRoleRequest(BaseModel):
    role: Role = Field(..., description="Role to act as")
