from pydantic import BaseModel


class AuthJWTSettings(BaseModel):
    secret: str
    algorithm: str = "HS256"
    expire_minutes: int


class TokenData(BaseModel):
    user_id: str
