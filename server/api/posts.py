# server/api/posts.py

import logging
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from models.post import Post as PostModel
from core.errors import RejectedContentError, StorageError
from core.moderation import ContentModerator
from core.session import SessionUser, require_session


logger = logging.getLogger(__name__)

# Every posts route sits behind the session gate.
router = APIRouter(prefix="/api/posts", tags=["posts"], dependencies=[Depends(require_session)])

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Largest page whose offset still fits a signed 64-bit SQL integer.
MAX_PAGE = (2 ** 63 - 1) // MAX_PAGE_SIZE


# -------------------------------
# Schemas
# -------------------------------

class Post(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    author: str
    published: bool
    created_at: datetime
    updated_at: datetime


class PostPage(BaseModel):
    items: List[Post]
    total: int
    page: int
    page_size: int


class CreatePostRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)


# -------------------------------
# Post Catalog
# -------------------------------

def _to_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return 0


def normalize_paging(page: Optional[str], page_size: Optional[str]) -> tuple[int, int]:
    """
    Out-of-range or unparsable values fall back to the defaults instead of failing.
    """
    page_num = _to_int(page, DEFAULT_PAGE)
    if page_num < 1 or page_num > MAX_PAGE:
        page_num = DEFAULT_PAGE
    size = _to_int(page_size, DEFAULT_PAGE_SIZE)
    if size < 1 or size > MAX_PAGE_SIZE:
        size = DEFAULT_PAGE_SIZE
    return page_num, size


def list_published_posts(db: Session, page: int, page_size: int, q: str = "") -> tuple[list, int]:
    query = db.query(PostModel).filter(PostModel.published.is_(True))

    q = q.strip()
    if q:
        query = query.filter(or_(
            PostModel.title.contains(q, autoescape=True),
            PostModel.content.contains(q, autoescape=True),
        ))

    offset = (page - 1) * page_size
    try:
        total = query.count()
        items = (
            query.order_by(PostModel.created_at.desc(), PostModel.id.desc())
            .offset(offset)
            .limit(page_size)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Listing posts failed")
        raise StorageError("db error") from exc
    return items, total


def create_published_post(db: Session, moderator: ContentModerator, req: CreatePostRequest) -> PostModel:
    """
    Nothing is written unless the moderator returns a clean verdict.
    """
    if not moderator.is_clean(req.title, req.content):
        raise RejectedContentError(
            "Your post contains inappropriate content or offensive language. "
            "Please review and modify your content before posting."
        )

    post = PostModel(title=req.title, content=req.content, author=req.author, published=True)
    try:
        db.add(post)
        db.commit()
        db.refresh(post)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Insert failed for post %r", req.title)
        raise StorageError("could not create post") from exc
    return post


def get_moderator(request: Request) -> ContentModerator:
    return request.app.state.moderator


# -------------------------------
# Endpoints
# -------------------------------

@router.get("", response_model=PostPage)
def list_posts(
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    q: str = "",
    db: Session = Depends(get_db),
):
    page_num, size = normalize_paging(page, page_size)
    items, total = list_published_posts(db, page_num, size, q)
    return {"items": items, "total": total, "page": page_num, "page_size": size}


@router.post("/create", response_model=Post, status_code=status.HTTP_201_CREATED)
def create_post(
    req: CreatePostRequest,
    session: SessionUser = Depends(require_session),
    moderator: ContentModerator = Depends(get_moderator),
    db: Session = Depends(get_db),
):
    try:
        post = create_published_post(db, moderator, req)
    except RejectedContentError:
        logger.warning("Rejected post from %s: %r", session.username, req.title)
        raise
    logger.info("Post id=%s created by %s", post.id, session.username)
    return post
