"""
Repository基础类
定义通用的数据访问接口和方法

Repository只负责构造与执行语句，不提交事务；事务边界由服务层控制。
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Type

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.functions import count as func_count

from draw2real.core.log_messages import log_messages
from draw2real.core.log_utils import get_logger
from draw2real.utils.id_utils import generate_uuid

logger = get_logger(__name__)


class BaseRepository(ABC):
    """Repository基础类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    @abstractmethod
    def model(self) -> Type[Any]:
        """返回Repository对应的模型类"""

    async def get_by_id(self, record_id: Any) -> Optional[Any]:
        """根据主键获取单个记录"""
        return await self.db.get(self.model, record_id)

    async def add(self, **kwargs: Any) -> Any:
        """
        新增记录并flush（不提交）

        模型的主键为字符串类型且未提供id时，自动生成UUID。
        """
        if "id" not in kwargs and self._uses_string_id():
            kwargs["id"] = generate_uuid()

        instance = self.model(**kwargs)
        self.db.add(instance)
        try:
            await self.db.flush()
        except Exception as e:
            logger.error(log_messages.DB_UPDATE_FAILED,
                         exception=e,
                         operation_name="add",
                         model_name=self.model.__name__)
            raise
        return instance

    async def list_recent(
        self,
        limit: int = 20,
        offset: int = 0,
        **filters: Any
    ) -> List[Any]:
        """按创建时间倒序分页查询"""
        query = select(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)
        query = query.order_by(desc(self.model.created_at)).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self, **filters: Any) -> int:
        """统计记录数量"""
        query = select(func_count()).select_from(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        result = await self.db.execute(query)
        return result.scalar() or 0

    def _uses_string_id(self) -> bool:
        id_column = getattr(self.model, "__table__").c.get("id")
        if id_column is None:
            return False
        return getattr(id_column.type, "python_type", None) is str
