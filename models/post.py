"""Post model definition."""

from __future__ import annotations

import enum

from . import db, utcnow


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


POST_STATUSES = tuple(status.value for status in PostStatus)


class Post(db.Model):
    """A blog article written by an administrator."""

    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    content = db.Column(db.Text, nullable=False)
    # Plain column: deleting a category leaves its posts pointing at a missing id.
    category_id = db.Column(db.Integer, nullable=False, index=True)
    author_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    image = db.Column(db.String(512), nullable=False)
    status = db.Column(
        db.Enum(*POST_STATUSES, name="post_status"),
        nullable=False,
        default=PostStatus.DRAFT.value,
        server_default=db.text("'draft'"),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    author = db.relationship("User", backref=db.backref("posts", lazy="dynamic"))
    category = db.relationship(
        "Category",
        primaryjoin="foreign(Post.category_id) == Category.id",
        viewonly=True,
    )

    def to_dict(self) -> dict:
        """Serialize the post with author and category names resolved."""

        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "category": (
                {"id": self.category.id, "name": self.category.name}
                if self.category is not None
                else None
            ),
            "category_id": self.category_id,
            "author": (
                {"id": self.author.id, "name": self.author.name}
                if self.author is not None
                else None
            ),
            "image": self.image,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Post id={self.id} slug={self.slug} status={self.status}>"
