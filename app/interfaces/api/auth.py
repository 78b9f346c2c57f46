"""Auth API routes: admin login, me."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.application.services.auth_service import authenticate_admin, create_access_token
from app.domain.schemas.auth import AdminRead, LoginRequest, TokenResponse
from app.interfaces.api.deps import get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest):
    admin = authenticate_admin(body.username, body.password)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario o contraseña incorrectos.",
        )

    access_token = create_access_token(data={"sub": admin.username, "role": admin.role})
    return TokenResponse(access_token=access_token, user=admin)


@router.get("/me", response_model=AdminRead)
def get_me(user: AdminRead = Depends(get_current_user)):
    return user
