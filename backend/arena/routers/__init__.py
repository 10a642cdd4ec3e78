"""
API 路由包
"""
from .battle import router as battle_router

__all__ = ["battle_router"]
