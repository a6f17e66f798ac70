"""
配置文件 - 项目配置管理
"""
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator


class GrpcSettings(BaseModel):
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 50051
    # This maps to GRPC option grpc.max_concurrent_streams
    max_concurrent_streams: int = 100
    # Seconds in-flight RPCs get to finish on shutdown
    grace_seconds: float = 5.0


class LoggingSettings(BaseModel):
    # empty -> DEBUG when Settings.DEBUG, INFO otherwise
    level: str = ""
    # "json" or "console"; empty picks console in DEBUG
    format: str = ""
    # per-logger level overrides, LOGGING__QUIET='{"grpc._cython": "ERROR"}'
    quiet: Dict[str, str] = Field(
        default_factory=lambda: {"grpc._cython": "WARNING", "asyncio": "WARNING"}
    )

    @field_validator("format")
    @classmethod
    def _check_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("", "json", "console"):
            raise ValueError(f"unknown log format: {v!r}")
        return v


class BookingSettings(BaseModel):
    default_currency: str = "CAD"
    base_fare_cents_per_segment: int = Field(default=15000, ge=0)
    tax_rate_percent: int = Field(default=20, ge=0)

    @field_validator("default_currency")
    @classmethod
    def _check_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not (v.isascii() and v.isalpha()):
            raise ValueError(f"invalid default currency: {v!r}")
        return v


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Booking RPC Service")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")

    # 分组配置：gRPC / 预订计价采用嵌套模型
    grpc: GrpcSettings = Field(default_factory=GrpcSettings)
    booking: BookingSettings = Field(default_factory=BookingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
