from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from database import Base, generate_uuid

class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("comment_author_post_idx", "author_id", "post_id"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    content = Column(Text, nullable=False)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    author = relationship("User", back_populates="comments")
    post = relationship("Post", back_populates="comments")
    notifications = relationship("Notification", back_populates="comment", cascade="all, delete")
