from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import JWTError, jwt
import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, AUTH_HEADER, SECRET_KEY, TOKEN_ACCESS
from ..database import get_db
from ..models import User
from ..schemas.user import UserCreate, UserRead

router = APIRouter()

ALGORITHM = "HS256"


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes.
    return password.encode('utf-8')[:72]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_bytes)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode('utf-8')


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user."""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed token for ``user_id`` with the auth access scope."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": user_id,
        "access": TOKEN_ACCESS,
        "jti": uuid4().hex,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def generate_auth_token(db: Session, user: User) -> str:
    """Issue a new token and store it on the user record."""
    token = create_access_token(user.id)
    user.add_token(token)
    db.add(user)
    db.commit()
    db.refresh(user)
    return token


def _decode_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or payload.get("access") != TOKEN_ACCESS:
        return None
    return payload


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the user owning the token in the auth header.

    The token has to verify against the signing secret and still be listed
    on the user record; a revoked token is rejected even if it has not
    expired. The user and the raw token are attached to ``request.state``.
    """
    token = request.headers.get(AUTH_HEADER)
    if not token:
        raise _unauthorized("Not authenticated")

    payload = _decode_token(token)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, payload["sub"])
    if user is None or not user.has_token(token):
        raise _unauthorized("Could not validate credentials")

    request.state.user = user
    request.state.token = token
    return user


@router.post("/users", response_model=UserRead)
def register(
    user: UserCreate,
    response: Response,
    db: Session = Depends(get_db),
):
    """Create a new user account and log it in."""
    db_user = db.query(User).filter(User.email == user.email).first()
    if db_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    db_user = User(email=user.email, hashed_password=get_password_hash(user.password))
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    db.refresh(db_user)

    response.headers[AUTH_HEADER] = generate_auth_token(db, db_user)
    return db_user


@router.get("/users/me", response_model=UserRead)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.post("/users/login", response_model=UserRead)
def login(
    user: UserCreate,
    response: Response,
    db: Session = Depends(get_db),
):
    """Check credentials and hand out a new token."""
    db_user = authenticate_user(db, user.email, user.password)
    if not db_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect email or password",
        )

    response.headers[AUTH_HEADER] = generate_auth_token(db, db_user)
    return db_user


@router.delete("/users/me/token")
def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Revoke the token this request was made with; other tokens stay valid."""
    current_user.remove_token(request.state.token)
    db.add(current_user)
    db.commit()
    return Response(status_code=status.HTTP_200_OK)
