import logging
from typing import Annotated

from fastapi import Request, Depends, HTTPException
from firebase_admin.auth import verify_id_token, verify_session_cookie

from models.user import User
from services.firestore import FirestoreDB
from services.posts import PostService

logger = logging.getLogger(__name__)


def get_current_user(request: Request) -> User:
    """
    Verify the Firebase ID token from the Authorization header, or the session
    cookie when no header is sent, and return user info
    """
    authorization = request.headers.get("Authorization")
    session_cookie = request.cookies.get("session")

    if authorization:
        if not authorization.startswith("Bearer "):
            raise HTTPException(
                status_code=401,
                detail="Invalid authorization header"
            )
        token = authorization.split("Bearer ")[1]
        verify = verify_id_token
    elif session_cookie:
        token = session_cookie
        verify = verify_session_cookie
    else:
        raise HTTPException(
            status_code=401,
            detail="Missing authorization header"
        )

    try:
        decoded_token = verify(token, check_revoked=True, clock_skew_seconds=10)
        return User(
            user_id=decoded_token["uid"],
            email=decoded_token.get("email"),
        )
    except Exception as e:
        logger.warning("Invalid authentication token: %s", e)
        raise HTTPException(
            status_code=401,
            detail=f"Invalid authentication token: {str(e)}"
        )


async def get_firestore(request: Request) -> FirestoreDB:
    """ Get Firestore DB from app state """
    return request.app.state.firestore


async def get_post_service(db: Annotated[FirestoreDB, Depends(get_firestore)]) -> PostService:
    """Build the post service over the app's Firestore DB"""
    return PostService(db)


CurrentUser = Annotated[User, Depends(get_current_user)]
Firestore = Annotated[FirestoreDB, Depends(get_firestore)]
Posts = Annotated[PostService, Depends(get_post_service)]
