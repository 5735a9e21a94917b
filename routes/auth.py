import logging
import os
from urllib.parse import urlparse

from fastapi import APIRouter, Request, Response, HTTPException
from firebase_admin import auth

from models.token import TokenRequest

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_COOKIE_DAYS = int(os.getenv("SESSION_COOKIE_DAYS", "5"))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() in {"1", "true", "yes"}


@router.post("/login")
def login(token_request: TokenRequest, request: Request, response: Response):
    """Exchange a Firebase ID token for an http-only session cookie"""
    try:
        decoded_token = auth.verify_id_token(
            id_token=token_request.id_token,
            clock_skew_seconds=10
        )

        expires_in = SESSION_COOKIE_DAYS * 24 * 60 * 60
        session_cookie = auth.create_session_cookie(
            token_request.id_token,
            expires_in=expires_in
        )
    except Exception as e:
        logger.warning("Login failed: %s", e)
        raise HTTPException(status_code=401, detail=f"Authentication failed: {str(e)}")

    origin = request.headers.get("origin", "")
    domain = None

    # outside local development the cookie is scoped to the caller's host
    if origin and "localhost" not in origin:
        domain = urlparse(origin).hostname

    response.set_cookie(
        key="session",
        value=str(session_cookie),
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        max_age=expires_in,
        path="/",
        samesite="lax",
        domain=domain
    )

    return {"success": True, "user_id": decoded_token["uid"]}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(
        key="session",
        path="/",
        httponly=True,
        secure=SESSION_COOKIE_SECURE
    )
    return {"success": True}


@router.get("/verify")
def verify_session(request: Request):
    session_cookie = request.cookies.get("session")

    if not session_cookie:
        raise HTTPException(status_code=401, detail="No session cookie found")

    try:
        decoded_claims = auth.verify_session_cookie(
            session_cookie=session_cookie,
            check_revoked=True,
            clock_skew_seconds=10
        )
    except auth.InvalidSessionCookieError:
        raise HTTPException(status_code=401, detail="Invalid session")
    except Exception as e:
        raise HTTPException(status_code=401, detail=f"Session verification failed: {str(e)}")

    return {
        "valid": True,
        "user": {
            "uid": decoded_claims["uid"],
            "email": decoded_claims.get("email")
        }
    }
