# sweeply/account.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field

from .auth import AuthManager, OperationResult, SessionState, UserProfile
from .deps import get_auth, require_user

router = APIRouter(prefix="/auth", tags=["auth"])


class SignUpIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    business_name: Optional[str] = None


class SignInIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ResetPasswordIn(BaseModel):
    email: EmailStr


class ProfileIn(BaseModel):
    business_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    profile_image_url: Optional[str] = None


def _raise_on_failure(result: OperationResult) -> None:
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.error)


@router.get("/session", response_model=SessionState)
def session(auth: AuthManager = Depends(get_auth)):
    return auth.state()


@router.post("/sign-up", response_model=SessionState)
async def sign_up(payload: SignUpIn, auth: AuthManager = Depends(get_auth)):
    _raise_on_failure(await auth.sign_up(payload.email, payload.password, payload.name, payload.business_name))
    return auth.state()


@router.post("/sign-in", response_model=SessionState)
async def sign_in(payload: SignInIn, auth: AuthManager = Depends(get_auth)):
    _raise_on_failure(await auth.sign_in(payload.email, payload.password))
    return auth.state()


@router.post("/sign-out", response_model=SessionState)
async def sign_out(auth: AuthManager = Depends(get_auth)):
    _raise_on_failure(await auth.sign_out())
    return auth.state()


@router.post("/reset-password", response_model=OperationResult)
async def reset_password(payload: ResetPasswordIn, auth: AuthManager = Depends(get_auth)):
    result = await auth.reset_password(payload.email)
    _raise_on_failure(result)
    return result


@router.put("/profile", response_model=SessionState)
async def update_profile(payload: ProfileIn, auth: AuthManager = Depends(require_user)):
    if auth.user_profile is None:
        raise HTTPException(status_code=404, detail="No profile for this account")
    profile: UserProfile = auth.user_profile.model_copy(update=payload.model_dump(exclude_unset=True))
    _raise_on_failure(await auth.update_profile(profile))
    return auth.state()


@router.delete("/error", response_model=SessionState)
def dismiss_error(auth: AuthManager = Depends(get_auth)):
    auth.clear_error()
    return auth.state()
