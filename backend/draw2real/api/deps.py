"""
API依赖注入
从 app.state 取出应用级服务，并按请求创建业务处理器
"""

from fastapi import Depends, Request

from draw2real.services.container import AppServices
from draw2real.services.credits.handler import CreditsHandler
from draw2real.services.drawing.handler import DrawingHandler
from draw2real.services.gallery.handler import GalleryHandler
from draw2real.services.generation.handler import GenerationHandler
from draw2real.services.payments.handler import PaymentHandler


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_drawing_handler(services: AppServices = Depends(get_services)) -> DrawingHandler:
    return DrawingHandler(services.drawings)


def get_generation_handler(services: AppServices = Depends(get_services)) -> GenerationHandler:
    return GenerationHandler(services.task_manager)


def get_credits_handler(services: AppServices = Depends(get_services)) -> CreditsHandler:
    return CreditsHandler(services.ledger, services.referrals)


def get_payment_handler(services: AppServices = Depends(get_services)) -> PaymentHandler:
    return PaymentHandler(services.checkout)


def get_gallery_handler(services: AppServices = Depends(get_services)) -> GalleryHandler:
    return GalleryHandler(services.gallery)
