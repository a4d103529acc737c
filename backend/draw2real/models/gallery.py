"""
画廊记录数据模型
一次成功生成对应一条记录，创建后不再修改
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from draw2real.db.database import Base


class GalleryRecord(Base):
    """原图与生成图的配对记录"""

    __tablename__ = "gallery_records"

    id = Column(String(36), primary_key=True, index=True)
    # 原图上传失败时为空字符串
    original_image_url = Column(Text, nullable=False, default="")
    generated_image_url = Column(Text, nullable=False)
    prompt = Column(Text, nullable=True)
    user_id = Column(String(64), nullable=True, index=True)

    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<GalleryRecord(id={self.id}, user_id={self.user_id})>"
