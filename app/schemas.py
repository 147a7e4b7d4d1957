from pydantic import BaseModel, ConfigDict

# Request fields default to empty so the services, not pydantic, report
# missing values as a 400 ValidationError.


# --- Auth / User ---

class UserRegister(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class UserLogin(BaseModel):
    email: str = ""
    password: str = ""


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: str | None = None
    model_config = ConfigDict(from_attributes=True)


# --- Comment ---

class CommentCreate(BaseModel):
    content: str | None = None
    post_id: int | None = None


class CommentUpdate(BaseModel):
    content: str | None = None


# --- Shared ---

class MessageResponse(BaseModel):
    message: str
