"""
积分购买与推荐相关的Pydantic模型
"""

from typing import Optional

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """创建Checkout会话请求"""
    price_id: str = Field(..., description="积分包ID: price_1 | price_5 | price_10 | price_20")
    origin: Optional[str] = Field(None, description="前端站点地址，支付完成后跳回该站点；为空或不在允许列表中时使用请求头Origin或默认前端地址")


class CheckoutConfirmRequest(BaseModel):
    """支付返回页确认请求"""
    session_id: str = Field(..., min_length=1, description="Stripe Checkout会话ID")


class ReferralRegisterRequest(BaseModel):
    """登记推荐码请求"""
    code: str = Field(..., min_length=4, max_length=16, description="推荐人的推荐码")
