from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from typing import Optional, Literal
from datetime import datetime

Role = Literal["employee", "manager", "admin"]


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class AdminUserCreate(UserCreate):
    role: Role = "employee"
    is_active: bool = True
    hire_date: Optional[datetime] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    role: str
    department: Optional[str] = None
    position: Optional[str] = None
    hire_date: Optional[datetime] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    # IMPORTANTE para devolver ORM:
    model_config = ConfigDict(from_attributes=True)


class UserBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    department: Optional[str] = None
    position: Optional[str] = None
    profile_image: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)
    hire_date: Optional[datetime] = None
    bio: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = None
    profile_image: Optional[str] = Field(default=None, max_length=500)
    # solo admin
    role: Optional[Role] = None
    is_active: Optional[bool] = None
