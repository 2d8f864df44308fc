"""
Login endpoint. The password is hashed here, never by the client.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from cashflow.auth.gate import AuthGate, hash_password
from cashflow.exceptions import InactiveUserError, UserNotFoundError, WrongPasswordError
from cashflow.api.dependencies import get_gate
from cashflow.api.response_models import LoginRequest, LoginResponse, UserModel

router = APIRouter(prefix="/api/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid username or password."


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, gate: AuthGate = Depends(get_gate)):
    try:
        user = gate.authenticate(req.username, hash_password(req.password))
    except (UserNotFoundError, WrongPasswordError):
        raise HTTPException(401, INVALID_CREDENTIALS)
    except InactiveUserError as exc:
        raise HTTPException(403, str(exc))
    return LoginResponse(user=UserModel(**user.public()))
