import uuid
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Iterable

from google.cloud import firestore
from google.cloud.firestore import ArrayUnion, ArrayRemove

POSTS = "posts"
USERS = "users"

# reference paths understood by FirestoreDB.populate
POPULATE_PATHS = ("user", "likes", "comments.user")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FirestoreDB:
    def __init__(self, client: firestore.Client):
        self.db = client

    def collection(self, name: str):
        return self.db.collection(name)

    @staticmethod
    def _to_post(snapshot) -> Dict[str, Any]:
        post_data = snapshot.to_dict()
        post_data["id"] = snapshot.id
        post_data.setdefault("likes", [])
        post_data.setdefault("comments", [])
        return post_data

    def create_post(self, user_id: str, title: Optional[str], content: Optional[str]) -> Dict[str, Any]:
        """Create a new post owned by user_id and return it with raw references"""
        new_post_ref = self.collection(POSTS).document()
        timestamp = now_iso()
        new_post_data = {
            "title": title,
            "content": content,
            "user": user_id,
            "likes": [],
            "comments": [],
            "created_at": timestamp,
            "updated_at": timestamp,
        }
        new_post_ref.set(new_post_data)
        return {"id": new_post_ref.id, **new_post_data}

    def get_all_posts(self) -> List[Dict[str, Any]]:
        """Get all posts sorted by creation date descending"""
        posts_ref = self.collection(POSTS).order_by("created_at", direction=firestore.Query.DESCENDING).stream()
        return [self._to_post(doc) for doc in posts_ref]

    def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get a post by ID, None when it does not exist"""
        snapshot = self.collection(POSTS).document(post_id).get()
        if not snapshot.exists:
            return None
        return self._to_post(snapshot)

    def toggle_like(self, post_id: str, user_id: str) -> Optional[bool]:
        """
        Like the post if user_id has not liked it yet, unlike it otherwise.

        Membership is decided from a plain read, so two concurrent toggles by the
        same user may both act on the same state. ArrayUnion / ArrayRemove keep the
        stored array free of duplicates either way.

        Returns True when the post is now liked, False when unliked, None if the
        post does not exist.
        """
        post_ref = self.collection(POSTS).document(post_id)
        snapshot = post_ref.get()
        if not snapshot.exists:
            return None

        likes = snapshot.to_dict().get("likes", [])
        liked = user_id not in likes
        post_ref.update({
            "likes": ArrayUnion([user_id]) if liked else ArrayRemove([user_id]),
            "updated_at": now_iso(),
        })
        return liked

    def add_comment(self, post_id: str, user_id: str, text: Optional[str]) -> Optional[Dict[str, Any]]:
        """Append a comment to the post's embedded comment list"""
        post_ref = self.collection(POSTS).document(post_id)
        if not post_ref.get().exists:
            return None

        comment_data = {
            "id": uuid.uuid4().hex,
            "text": text,
            "user": user_id,
            "created_at": now_iso(),
        }
        # the uuid makes every comment distinct, so ArrayUnion always appends
        post_ref.update({
            "comments": ArrayUnion([comment_data]),
            "updated_at": comment_data["created_at"],
        })
        return comment_data

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        Batch fetch user profiles projected on their username.
        Returns a dictionary mapping user ids to {id, username}; unknown ids are absent.
        """
        ids = list(dict.fromkeys(uid for uid in user_ids if isinstance(uid, str) and uid))
        if not ids:
            return {}

        refs = [self.collection(USERS).document(uid) for uid in ids]
        users = {}
        for snapshot in self.db.get_all(refs, field_paths=["username"]):
            if snapshot.exists:
                users[snapshot.id] = {
                    "id": snapshot.id,
                    "username": snapshot.to_dict().get("username"),
                }
        return users

    def populate(self, posts: List[Dict[str, Any]], paths: Iterable[str] = ("user", "likes")) -> List[Dict[str, Any]]:
        """
        Replace user ids on the given reference paths with {id, username}.

        All referenced users are fetched in a single batch and joined in memory.
        A missing author becomes None and missing likers are dropped.
        """
        paths = set(paths)
        unknown = paths.difference(POPULATE_PATHS)
        if unknown:
            raise ValueError(f"Cannot populate {sorted(unknown)}")

        wanted = []
        for post in posts:
            if "user" in paths:
                wanted.append(post.get("user"))
            if "likes" in paths:
                wanted.extend(post.get("likes", []))
            if "comments.user" in paths:
                wanted.extend(comment.get("user") for comment in post.get("comments", []))

        users = self.get_users(wanted)

        for post in posts:
            if "user" in paths:
                post["user"] = users.get(post.get("user"))
            if "likes" in paths:
                post["likes"] = [users[uid] for uid in post.get("likes", []) if uid in users]
            if "comments.user" in paths:
                post["comments"] = [
                    {**comment, "user": users.get(comment.get("user"))}
                    for comment in post.get("comments", [])
                ]

        return posts
