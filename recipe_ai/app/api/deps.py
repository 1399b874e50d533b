from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from recipe_ai.app.core.config import get_settings
from recipe_ai.app.db import models
from recipe_ai.app.db.session import get_db
from recipe_ai.app.schemas.auth import CurrentUser
from recipe_ai.app.services.ai.prompts.loader import DefaultPromptProvider, FileDefaultPromptProvider
from recipe_ai.app.services.server_config_service import ConfigStore, DatabaseConfigStore

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    settings = get_settings()
    try:
        payload = jwt.decode(credentials.credentials, settings.auth_secret_key, algorithms=[settings.auth_algorithm])
        sub = payload.get("sub")
        if sub is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
        return CurrentUser(id=str(sub), email=payload.get("email"))
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")


def get_db_session(db: Session = Depends(get_db)) -> Session:
    return db


def get_config_store(db: Session = Depends(get_db_session)) -> ConfigStore:
    return DatabaseConfigStore(db)


def get_default_prompts() -> DefaultPromptProvider:
    return FileDefaultPromptProvider()


def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db_session),
) -> CurrentUser:
    user = db.get(models.User, current_user.id)
    if user is None or not user.is_server_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Server admin access required")
    return current_user
