from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Table, and_
from sqlalchemy.orm import relationship, foreign
from datetime import datetime
from app.database import Base

VISIBILITIES = ("public", "private", "connections")
MEDIA_TYPES = ("image", "video", "document")

post_likes = Table(
    "post_likes",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)

post_bookmarks = Table(
    "post_bookmarks",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)

comment_likes = Table(
    "comment_likes",
    Base.metadata,
    Column("comment_id", Integer, ForeignKey("comments.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, default="", nullable=False)
    visibility = Column(String(20), default="public", nullable=False, index=True)
    shares_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User")
    media = relationship(
        "PostMedia",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostMedia.id",
    )
    likers = relationship("User", secondary=post_likes, order_by="User.id")
    bookmarked_by = relationship("User", secondary=post_bookmarks)
    # Top-level comments only; replies hang off their parent comment.
    comments = relationship(
        "Comment",
        primaryjoin=lambda: and_(Post.id == foreign(Comment.post_id), Comment.parent_comment_id.is_(None)),
        order_by=lambda: Comment.created_at.desc(),
        viewonly=True,
    )


class PostMedia(Base):
    __tablename__ = "post_media"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    storage_id = Column(String(255), nullable=True)
    type = Column(String(20), default="image", nullable=False)  # image, video, document

    post = relationship("Post", back_populates="media")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    # No database constraint: replies outlive a deleted parent.
    parent_comment_id = Column(Integer, nullable=True, index=True)
    likes_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User")
    likers = relationship("User", secondary=comment_likes, order_by="User.id")
    replies = relationship(
        "Comment",
        primaryjoin=lambda: Comment.id == foreign(Comment.parent_comment_id),
        order_by=lambda: Comment.created_at.asc(),
        viewonly=True,
    )
