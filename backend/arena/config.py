"""
配置管理模块
"""
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# 加载环境变量
load_dotenv()


class Settings(BaseModel):
    """应用配置"""

    # Firebase 配置
    google_application_credentials: str = os.getenv(
        "GOOGLE_APPLICATION_CREDENTIALS",
        "./firebase-credentials.json"
    )
    firestore_database: str = os.getenv("FIRESTORE_DATABASE", "(default)")
    battles_collection: str = os.getenv("BATTLES_COLLECTION", "battles")
    players_collection: str = os.getenv("PLAYERS_COLLECTION", "players")
    # 事务冲突时的最大重试次数
    firestore_max_attempts: int = int(os.getenv("FIRESTORE_MAX_ATTEMPTS", "5"))

    # 战斗配置
    battle_damage_model: Literal["classic", "phased"] = os.getenv("BATTLE_DAMAGE_MODEL", "phased")
    simulated_round_cap: int = int(os.getenv("SIMULATED_ROUND_CAP", "20"))

    # ATB 行动槽（客户端节奏）
    gauge_tick_seconds: float = float(os.getenv("GAUGE_TICK_SECONDS", "0.05"))
    gauge_default_speed: int = int(os.getenv("GAUGE_DEFAULT_SPEED", "10"))

    # 奖励结算
    reward_steal_min: float = float(os.getenv("REWARD_STEAL_MIN", "0.1"))
    reward_steal_max: float = float(os.getenv("REWARD_STEAL_MAX", "0.3"))
    points_currency: str = os.getenv("POINTS_CURRENCY", "PS")
    bounty_currency: str = os.getenv("BOUNTY_CURRENCY", "BT")
    points_ranking_stat: str = "points_ranking"
    bounty_ranking_stat: str = "bounty_ranking"

    # 日志
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API 配置
    api_prefix: str = "/api"
    cors_origins: list = ["*"]

    model_config = ConfigDict(env_file=".env", case_sensitive=False)


# 全局配置实例
settings = Settings()


def validate_config() -> bool:
    """
    验证配置是否完整

    Returns:
        bool: 配置是否有效
    """
    if not Path(settings.google_application_credentials).exists():
        print(f"警告: Firebase 凭证文件不存在: {settings.google_application_credentials}")
        return False

    if settings.reward_steal_min > settings.reward_steal_max:
        print("警告: REWARD_STEAL_MIN 大于 REWARD_STEAL_MAX")
        return False

    return True
