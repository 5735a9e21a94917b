from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


class UserRef(BaseModel):
    id: str
    username: Optional[str] = None


class Comment(BaseModel):
    id: str
    text: Optional[str] = None
    # raw uid until populated, None when the author no longer exists
    user: Union[UserRef, str, None] = None
    created_at: str


class Post(BaseModel):
    id: str
    title: Optional[str] = None
    content: Optional[str] = None
    user: Union[UserRef, str, None] = None
    likes: List[Union[UserRef, str]] = []
    comments: List[Comment] = []
    created_at: str
    updated_at: str


class PostCreate(BaseModel):
    # numbers are stored as their string form
    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: Optional[str] = None
    content: Optional[str] = None


class CommentCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    text: Optional[str] = None
