"""
画廊业务处理器
"""

from typing import Any, Dict, Optional

from draw2real.models.gallery import GalleryRecord
from .gallery_service import GalleryService


def record_to_dict(record: GalleryRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "original_image_url": record.original_image_url,
        "generated_image_url": record.generated_image_url,
        "prompt": record.prompt,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }


class GalleryHandler:
    """画廊业务处理器"""

    def __init__(self, gallery: GalleryService):
        self.gallery = gallery

    async def handle_list(self, user_id: Optional[str], skip: int, limit: int) -> Dict[str, Any]:
        records, total = await self.gallery.list(user_id=user_id, limit=limit, offset=skip)
        return {
            "items": [record_to_dict(record) for record in records],
            "total": total,
            "skip": skip,
            "limit": limit,
            "has_more": skip + len(records) < total,
        }
