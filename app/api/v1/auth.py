"""
Authentication endpoints
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.core.security import verify_password, create_access_token
from app.models.employee import Employee
from app.schemas.auth import LoginRequest, TokenResponse
from app.services.audit_service import log_audit
from app.utils.roles import role_name

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    Validates email and password, rejects inactive employees.
    Returns access token with employee id, email, role level and credit.
    """
    employee = db.query(Employee).filter(
        func.lower(Employee.email) == login_data.email.strip().lower()
    ).first()

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not employee.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    if not verify_password(login_data.password, employee.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    # JWT 'sub' claim must be a string
    token_data = {
        "sub": str(employee.id),
        "email": employee.email,
        "role": role_name(employee.role_level),
        "role_level": employee.role_level,
    }
    access_token = create_access_token(data=token_data)

    # Don't fail login if audit fails
    try:
        log_audit(
            db=db,
            actor_id=employee.id,
            action="AUTH_LOGIN_SUCCESS",
            entity_type="auth",
            entity_id=None,
            meta={"email": employee.email, "role_level": employee.role_level}
        )
    except Exception as e:
        db.rollback()
        logger.warning("Failed to log audit for login: %s", e)

    return TokenResponse(access_token=access_token, token_type="bearer")
