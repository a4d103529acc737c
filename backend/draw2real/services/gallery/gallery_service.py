"""
画廊服务
写入与查询原图/生成图配对记录
"""

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from draw2real.models.gallery import GalleryRecord
from draw2real.repositories.gallery import GalleryRepository


class GalleryService:
    """画廊服务"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(
        self,
        generated_image_url: str,
        original_image_url: Optional[str],
        prompt: Optional[str],
        user_id: Optional[str]
    ) -> GalleryRecord:
        """写入一条画廊记录，失败时抛出数据库异常"""
        async with self._session_factory() as session:
            record = await GalleryRepository(session).create_record(
                generated_image_url=generated_image_url,
                original_image_url=original_image_url,
                prompt=prompt,
                user_id=user_id
            )
            await session.commit()
            return record

    async def list(
        self,
        user_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[GalleryRecord], int]:
        """按时间倒序分页查询，返回 (记录, 总数)"""
        async with self._session_factory() as session:
            repository = GalleryRepository(session)
            records = await repository.list_records(user_id=user_id, limit=limit, offset=offset)
            total = await repository.count_records(user_id=user_id)
        return records, total
