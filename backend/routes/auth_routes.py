"""
Auth routes — register, login and token verification.
"""
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import bearer_token
from database import get_db
from services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class RegisterRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


# ── Routes ────────────────────────────────────────────────────────
@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return a session token."""
    session = AuthService.register(db, body.username, body.email, body.password)
    return {"message": "User registered successfully", **session}


@router.post("/login")
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email + password."""
    session = AuthService.login(db, body.email, body.password)
    return {"message": "Login successful", **session}


@router.get("/verify")
async def verify(request: Request, db: Session = Depends(get_db)):
    """Check the bearer token and that its user still exists."""
    user = AuthService.verify(db, bearer_token(request))
    return {"message": "Token is valid", "user": user}
