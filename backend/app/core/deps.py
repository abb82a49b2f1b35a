from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session, select

from .database import get_db, get_engine
from .security import verify_token
from ..models.user import User
from ..services.joins import JoinService
from ..services.notifications import NotificationFanout
from ..services.share_links import ShareLinkService

security = HTTPBearer()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> User:
    """Get the current authenticated user."""
    token = credentials.credentials
    user_id = verify_token(token)

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.exec(select(User).where(User.id == user_uuid)).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user



def get_share_link_service() -> ShareLinkService:
    return ShareLinkService(get_engine())


def get_notification_fanout() -> NotificationFanout:
    return NotificationFanout(get_engine())


def get_join_service(
    share_links: ShareLinkService = Depends(get_share_link_service),
    fanout: NotificationFanout = Depends(get_notification_fanout),
) -> JoinService:
    return JoinService(share_links.engine, share_links=share_links, fanout=fanout)
