"""
API路由聚合模块
将所有v1版本的路由统一注册

路由管理规范：
1. 所有路由文件内部使用相对路径（不以/开头）
2. 所有前缀统一在router.py中管理
3. Tags统一使用中文，与端点文件定义保持一致
"""

from fastapi import APIRouter

from draw2real.api.v1.endpoints import (
    credits,
    drawing,
    gallery,
    generation,
    payments,
    referral,
)

api_router = APIRouter()

# ==================== 画作与生成路由 ====================
api_router.include_router(drawing.router, prefix="/drawing", tags=["画作捕获"])
api_router.include_router(generation.router, prefix="/generation", tags=["画作生成"])
api_router.include_router(gallery.router, prefix="/gallery", tags=["画廊"])

# ==================== 积分与支付路由 ====================
api_router.include_router(credits.router, prefix="/credits", tags=["积分"])
api_router.include_router(payments.router, prefix="/payments", tags=["积分购买"])
api_router.include_router(referral.router, prefix="/referral", tags=["推荐"])
