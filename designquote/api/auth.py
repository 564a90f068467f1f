from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from designquote.schemas.user import TokenOut, UserOut
from designquote.db.session import get_db, commit_or_fail
from designquote.core.security import create_access_token, authenticate_user, get_current_user
from designquote.core.audit_log import log_audit
from designquote.core.enums import AuditAction
from designquote.core.response_builders import build_user_response

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    
    await log_audit(db, int(user.id), AuditAction.LOGIN, {"username": form_data.username}, entity_id=user.id)
    await commit_or_fail(db, "Login audit")
    
    token = create_access_token(str(user.id), user.role)
    return {"access_token": token}


@router.get("/me", response_model=UserOut)
async def me(current_user=Depends(get_current_user)):
    return build_user_response(current_user)
