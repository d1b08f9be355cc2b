"""API routes for user authentication: signup, login and the current principal."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import Annotated

from . import schemas
from . import security as auth_security
from . import service as auth_service
from .context import get_current_principal

logger = logging.getLogger(__name__)
router = APIRouter(
    tags=["Authentication"],
    prefix="/auth"
)

@router.post("/login", response_model=schemas.Token)
async def login_for_access_token(credentials: schemas.LoginRequest, request: Request):
    user = await auth_service.get_user_by_username(username=credentials.username)
    if not user or not auth_security.verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )
    access_token = request.app.state.token_verifier.create_token(user.username)
    return {"access_token": access_token, "token_type": "bearer"}

@router.post("/signup", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: schemas.UserCreate):
    existing_user_by_username = await auth_service.get_user_by_username(username=user_in.username)
    if existing_user_by_username:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )
    existing_user_by_email = await auth_service.get_user_by_email(email=user_in.email)
    if existing_user_by_email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    hashed_password = auth_security.get_password_hash(user_in.password)
    user_data_dict = user_in.model_dump(exclude={"password"})
    new_user_model = await auth_service.create_user(
        user_in=user_data_dict,
        hashed_password_val=hashed_password
    )
    logger.info(f"Registered user {new_user_model.username}")
    return schemas.UserResponse.model_validate(new_user_model)

@router.get("/me", response_model=schemas.AuthenticatedPrincipal)
async def read_current_principal(
    principal: Annotated[schemas.AuthenticatedPrincipal, Depends(get_current_principal)]
):
    return principal
