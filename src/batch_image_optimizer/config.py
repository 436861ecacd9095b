"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class OptimizerDefaults:
    """优化相关的默认配置"""

    # 质量设置
    DEFAULT_QUALITY: int = 85

    # 编码参数
    JPEG_OPTIMIZE: bool = True
    JPEG_PROGRESSIVE: bool = False
    PNG_COMPRESS_LEVEL: int = 9

    # 并发设置
    MAX_WORKERS: int = 4

    # 归档设置
    ARCHIVE_NAME: str = "optimized-images.zip"
    ARCHIVE_COMPRESS_LEVEL: int = 6


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.optimizer = OptimizerDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if quality := os.getenv("BIO_DEFAULT_QUALITY"):
            object.__setattr__(self.optimizer, "DEFAULT_QUALITY", int(quality))

        if max_workers := os.getenv("BIO_MAX_WORKERS"):
            object.__setattr__(self.optimizer, "MAX_WORKERS", int(max_workers))

        if progressive := os.getenv("BIO_JPEG_PROGRESSIVE"):
            object.__setattr__(
                self.optimizer,
                "JPEG_PROGRESSIVE",
                progressive.lower() in ("true", "1", "yes"),
            )

        if log_level := os.getenv("BIO_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
