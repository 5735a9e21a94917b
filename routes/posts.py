import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from dependencies import CurrentUser, Posts
from models.post import Post, PostCreate, CommentCreate
from services.posts import PostNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()

# Handlers are plain functions: the Firestore client blocks, so FastAPI runs them in its threadpool.


def server_error() -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": "Server Error"})


def not_found(e: PostNotFoundError) -> JSONResponse:
    logger.info("Post %s not found", e.post_id)
    return JSONResponse(status_code=404, content="Post not found")


@router.post("", status_code=201)
def create_post(post_data: PostCreate, posts: Posts, current_user: CurrentUser) -> Post:
    """Create a new post authored by the current user"""
    try:
        return posts.create_post(current_user.user_id, post_data.title, post_data.content)
    except Exception:
        logger.exception("Failed to create post")
        return server_error()


@router.get("")
def list_posts(posts: Posts) -> List[Post]:
    """Get all posts with author and likes populated"""
    try:
        return posts.list_posts()
    except Exception:
        logger.exception("Failed to list posts")
        return server_error()


@router.get("/{post_id}")
def get_post(post_id: str, posts: Posts) -> Post:
    """Get a single post with author, likes and comment authors populated"""
    try:
        return posts.get_post(post_id)
    except PostNotFoundError as e:
        return not_found(e)
    except Exception:
        logger.exception("Failed to fetch post %s", post_id)
        return server_error()


@router.put("/{post_id}/like")
def toggle_like(post_id: str, posts: Posts, current_user: CurrentUser) -> Post:
    """Toggle like status for a post"""
    try:
        return posts.toggle_like(current_user.user_id, post_id)
    except PostNotFoundError as e:
        return not_found(e)
    except Exception:
        logger.exception("Failed to toggle like on post %s", post_id)
        return server_error()


@router.post("/{post_id}/comment")
def add_comment(post_id: str, comment: CommentCreate, posts: Posts, current_user: CurrentUser) -> Post:
    """Add a comment to a post"""
    try:
        return posts.add_comment(current_user.user_id, post_id, comment.text)
    except PostNotFoundError as e:
        return not_found(e)
    except Exception:
        logger.exception("Failed to comment on post %s", post_id)
        return server_error()
