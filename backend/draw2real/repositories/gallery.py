"""
画廊记录数据访问层
"""

from typing import List, Optional

from draw2real.models.gallery import GalleryRecord
from .base import BaseRepository


class GalleryRepository(BaseRepository):
    """画廊记录Repository"""

    @property
    def model(self):
        return GalleryRecord

    async def create_record(
        self,
        generated_image_url: str,
        original_image_url: Optional[str],
        prompt: Optional[str],
        user_id: Optional[str]
    ) -> GalleryRecord:
        if not generated_image_url:
            raise ValueError("generated_image_url must not be empty")
        return await self.add(
            generated_image_url=generated_image_url,
            original_image_url=original_image_url or "",
            prompt=prompt,
            user_id=user_id
        )

    async def list_records(
        self,
        user_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[GalleryRecord]:
        if user_id is None:
            return await self.list_recent(limit=limit, offset=offset)
        return await self.list_recent(limit=limit, offset=offset, user_id=user_id)

    async def count_records(self, user_id: Optional[str] = None) -> int:
        if user_id is None:
            return await self.count()
        return await self.count(user_id=user_id)
