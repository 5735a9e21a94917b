import logging
from typing import List, Optional

from models.post import Post
from services.firestore import FirestoreDB

logger = logging.getLogger(__name__)

SUMMARY_VIEW = ("user", "likes")
DETAIL_VIEW = ("user", "likes", "comments.user")


class PostNotFoundError(LookupError):
    def __init__(self, post_id: str):
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


class PostService:
    """
    Post operations on top of FirestoreDB.

    Mutations and the re-fetch that follows them are separate store calls: a
    failed re-fetch leaves the mutation in place.
    """

    def __init__(self, db: FirestoreDB):
        self.db = db

    def _fetch(self, post_id: str, view) -> Post:
        post = self.db.get_post(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        self.db.populate([post], view)
        return Post.model_validate(post)

    def create_post(self, user_id: str, title: Optional[str], content: Optional[str]) -> Post:
        """Create a post authored by the authenticated user"""
        post = self.db.create_post(user_id, title, content)
        logger.info("User %s created post %s", user_id, post["id"])
        return Post.model_validate(post)

    def list_posts(self) -> List[Post]:
        """All posts, newest first, with author and likers populated"""
        posts = self.db.populate(self.db.get_all_posts(), SUMMARY_VIEW)
        return [Post.model_validate(post) for post in posts]

    def get_post(self, post_id: str) -> Post:
        """Single post with author, likers and comment authors populated"""
        return self._fetch(post_id, DETAIL_VIEW)

    def toggle_like(self, user_id: str, post_id: str) -> Post:
        liked = self.db.toggle_like(post_id, user_id)
        if liked is None:
            raise PostNotFoundError(post_id)
        logger.info("User %s %s post %s", user_id, "liked" if liked else "unliked", post_id)
        return self._fetch(post_id, SUMMARY_VIEW)

    def add_comment(self, user_id: str, post_id: str, text: Optional[str]) -> Post:
        comment = self.db.add_comment(post_id, user_id, text)
        if comment is None:
            raise PostNotFoundError(post_id)
        logger.info("User %s commented %s on post %s", user_id, comment["id"], post_id)
        return self._fetch(post_id, DETAIL_VIEW)
