"""
FastAPI 应用入口
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arena.config import settings, validate_config
from arena.routers import battle_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# 创建 FastAPI 应用
app = FastAPI(
    title="Arena Battle API",
    description="基于 Firestore 的 PvP 对战系统",
    version="0.1.0",
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(battle_router, prefix=settings.api_prefix, tags=["Battle"])


@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    print("=" * 60)
    print("Arena 对战服务启动中...")
    print("=" * 60)

    if validate_config():
        print("✓ 配置验证通过")
    else:
        print("✗ 配置验证失败，请检查环境变量")

    print(f"✓ 伤害模型: {settings.battle_damage_model}")
    print(f"✓ API 文档: http://localhost:8000/docs")
    print("=" * 60)


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "Arena Battle API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "arena.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
