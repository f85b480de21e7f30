"""
===============================================================================
TARJETA CRC — backoffice/interfaces/api/http/routers/auth.py
===============================================================================

Responsibilities:
    - POST /auth/login: credenciales -> access token (mensaje de error único).
    - GET  /auth/me: snapshot del actor actual.

Collaborators:
    - AuthenticateUserUseCase (vía container)
    - identity.tokens.AccessTokenCodec, identity.auth_users.require_user
    - audit.emit_audit_event
===============================================================================
"""

from __future__ import annotations

from backoffice.application.usecases import AuthenticateUserUseCase
from backoffice.audit import emit_audit_event
from backoffice.container import get_audit_repository, get_authenticate_user_use_case
from backoffice.domain.entities import User
from backoffice.domain.repositories import AuditEventRepository
from backoffice.identity.auth_users import require_user
from backoffice.identity.tokens import AccessTokenCodec
from fastapi import APIRouter, Depends

from ..schemas.users import LoginReq, LoginRes, UserRes

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginRes)
def login(
    req: LoginReq,
    use_case: AuthenticateUserUseCase = Depends(get_authenticate_user_use_case),
    audit_repo: AuditEventRepository = Depends(get_audit_repository),
):
    user = use_case.execute(req.email, req.password)
    issued = AccessTokenCodec.from_settings().issue(user)

    emit_audit_event(audit_repo, action="auth.login", actor=user, target_id=user.id)
    return LoginRes(
        access_token=issued.token,
        expires_in=issued.expires_in,
        user=UserRes.from_domain(user),
    )


@router.get("/me", response_model=UserRes)
def me(actor: User = Depends(require_user())):
    return UserRes.from_domain(actor)
