from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from travel_companion.auth import require_admin, require_user
from travel_companion.db import get_db
from travel_companion.errors import NotFoundError
from travel_companion.log import get_logger
from travel_companion.models import BlogPost, Comment, User
from travel_companion.schemas import BlogPostIn, BlogPostOut, CommentIn, CommentOut, dump

logger = get_logger(__name__)

router = APIRouter(prefix="/blog", tags=["blog"])


def _post_or_404(db: Session, post_id: int) -> BlogPost:
    post = db.get(BlogPost, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


@router.get("")
def list_posts(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    stmt = (
        select(BlogPost)
        .options(selectinload(BlogPost.author))
        .order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
    )
    return [dump(BlogPostOut, post) for post in db.scalars(stmt)]


@router.post("", status_code=201)
def create_post(
    payload: BlogPostIn,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    post = BlogPost(title=payload.title, content=payload.content, author_id=admin.id)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Blog post %s created by %s", post.id, admin.username)
    return dump(BlogPostOut, post)


@router.put("/{post_id}")
def update_post(
    post_id: int,
    payload: BlogPostIn,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    post = _post_or_404(db, post_id)
    post.title = payload.title
    post.content = payload.content
    db.commit()
    db.refresh(post)
    return dump(BlogPostOut, post)


@router.delete("/{post_id}")
def delete_post(
    post_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    post = _post_or_404(db, post_id)
    data = dump(BlogPostOut, post)
    db.delete(post)
    db.commit()
    logger.info("Blog post %s deleted by %s", post_id, admin.username)
    return data


@router.get("/{post_id}/comments")
def list_comments(post_id: int, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    _post_or_404(db, post_id)
    stmt = (
        select(Comment)
        .options(selectinload(Comment.author))
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at, Comment.id)
    )
    return [dump(CommentOut, comment) for comment in db.scalars(stmt)]


@router.post("/{post_id}/comments", status_code=201)
def add_comment(
    post_id: int,
    payload: CommentIn,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    _post_or_404(db, post_id)
    comment = Comment(post_id=post_id, author_id=user.id, content=payload.content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return dump(CommentOut, comment)
