from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from tubely.auth import create_access_token, get_current_user, hash_password, verify_password
from tubely.database import get_db
from tubely.errors import BadRequestError, UnauthorizedError
from tubely.models.user import User
from tubely.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    """Register with email and password."""
    email = body.email.strip().lower()
    if not email or not body.password:
        raise BadRequestError("Email and password are required")
    if len(body.password) < 6:
        raise BadRequestError("Password must be at least 6 characters")
    if db.query(User).filter(func.lower(User.email) == email).first():
        raise BadRequestError("Email already registered")
    user = User(email=email, password=hash_password(body.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.post("/auth/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Login with email and password."""
    email = body.email.strip().lower()
    user = db.query(User).filter(func.lower(User.email) == email).first()
    if not user or not verify_password(body.password, user.password):
        raise UnauthorizedError("Invalid email or password")
    return TokenResponse(access_token=create_access_token(user.id, user.email))


@router.get("/auth/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return user
