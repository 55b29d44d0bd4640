"""
Blog posts and the farm doctor problem catalogue.
"""

import re
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import Post, PostStatus, Problem, User
from app.schemas import PostResponse
from app.services.exceptions import ConflictError, InvalidStateError, NotFoundError


def slugify(title: str) -> str:
    """'Growing Kale in 2025!' -> 'growing-kale-in-2025'"""
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def to_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        slug=post.slug,
        title=post.title,
        excerpt=post.excerpt,
        content=post.content,
        author=post.author,
        image_url=post.image_url,
        status=post.status.value,
        date=post.date.strftime("%Y-%m-%d")
    )


class BlogService:
    def __init__(self, db: Session):
        self.db = db

    def list_posts(self, include_drafts: bool = False) -> List[Post]:
        query = self.db.query(Post)
        if not include_drafts:
            query = query.filter(Post.status == PostStatus.PUBLISHED)
        return query.order_by(Post.date.desc()).all()

    def get_post(self, slug: str, include_drafts: bool = False) -> Post:
        query = self.db.query(Post).filter(Post.slug == slug)
        if not include_drafts:
            query = query.filter(Post.status == PostStatus.PUBLISHED)
        post = query.first()
        if not post:
            raise NotFoundError("Post not found")
        return post

    def create_post(
        self,
        title: str,
        content: str,
        excerpt: str,
        author: Optional[str] = None,
        slug: Optional[str] = None,
        image_url: Optional[str] = None,
        status: PostStatus = PostStatus.PUBLISHED,
        user: Optional[User] = None
    ) -> Post:
        slug = slugify(slug or title)
        if not slug:
            raise InvalidStateError("Title must contain letters or digits")

        if self.db.query(Post.id).filter(Post.slug == slug).first():
            raise ConflictError(f"A post with slug '{slug}' already exists")

        author = author or (user.name if user and user.name else None) or "Shamba Fresh"
        post = Post(
            slug=slug,
            title=title,
            content=content,
            excerpt=excerpt,
            author=author,
            image_url=image_url or None,
            status=status
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post


class ProblemService:
    def __init__(self, db: Session):
        self.db = db

    def list_problems(self, category: Optional[str] = None) -> List[Problem]:
        query = self.db.query(Problem)
        if category and category != "all":
            query = query.filter(Problem.category == category)
        return query.order_by(Problem.id).all()
