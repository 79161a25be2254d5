from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Credentials for both registration and login."""
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserRead(BaseModel):
    """Public view of a user; the password hash and tokens stay server side."""
    id: str
    email: str

    class Config:
        from_attributes = True
