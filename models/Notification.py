from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, Enum as SQLEnum, func
from sqlalchemy.orm import relationship
from database import Base, generate_uuid
import enum

class NotificationType(enum.Enum):
    LIKE = "LIKE"
    COMMENT = "COMMENT"
    FOLLOW = "FOLLOW"

class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("notification_user_created_idx", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)  # Recipient
    creator_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)  # Actor
    type = Column(SQLEnum(NotificationType, name="notification_type"), nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=True)
    comment_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    recipient = relationship("User", foreign_keys=[user_id], back_populates="notifications")
    creator = relationship("User", foreign_keys=[creator_id], back_populates="sent_notifications")
    post = relationship("Post", back_populates="notifications")
    comment = relationship("Comment", back_populates="notifications")
