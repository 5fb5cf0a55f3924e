from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    coach_slug: str | None = None  # set when signing in from a coach page


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # access token lifetime, seconds

    @classmethod
    def issued(cls, access_token: str, refresh_token: str, expires_in: int) -> "TokenPair":
        return cls(access_token=access_token, refresh_token=refresh_token, expires_in=expires_in)


class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutOut(BaseModel):
    message: str = "Logged out"
