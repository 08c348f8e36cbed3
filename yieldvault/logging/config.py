"""Logging sink settings for the vault.

LOG_ 환경 변수에서 콘솔/파일 sink 설정을 읽습니다. 볼트 작업 로그는
vault/operation/caller 컨텍스트를 달고 나오므로, 콘솔 포맷에 이 컨텍스트를
표시할지 여부도 여기서 결정합니다.

Rules Applied:
    - #11 Pydantic Modeling: BaseSettings, Literal levels
    - #15 Logging Standards: Configurable dual sinks
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseSettings):
    """콘솔 + 회전 파일 sink 설정.

    Environment Variables:
        - LOG_LOG_DIR: 파일 sink 디렉토리
        - LOG_CONSOLE_LEVEL / LOG_FILE_LEVEL: 최소 레벨
        - LOG_ENABLE_FILE: 파일 sink 사용 여부 (CLI 기본은 off)
        - LOG_JSON_LOGS: 파일 sink JSON 직렬화
        - LOG_SHOW_CONTEXT: 콘솔에 [vault/operation] 표시
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_dir: Path = Field(default=Path("logs"), description="파일 sink 디렉토리")
    file_prefix: str = Field(default="vault", min_length=1, description="로그 파일 이름 접두사")

    console_level: LogLevel = Field(default="INFO")
    file_level: LogLevel = Field(default="DEBUG")
    show_context: bool = Field(
        default=True,
        description="콘솔 라인에 [vault/operation] 컨텍스트 출력",
    )

    # ==========================================================================
    # File Sink
    # ==========================================================================
    enable_file: bool = Field(default=True)
    rotation: str = Field(default="50 MB", description="회전 정책 (예: '100 MB', '1 day')")
    retention: str = Field(default="7 days")
    compression: str = Field(default="gz")
    json_logs: bool = Field(
        default=True,
        description="파일 sink를 JSON으로 직렬화 (extra에 operation_id 포함)",
    )

    # traceback 변수 값 노출은 잔고/allowance가 그대로 찍히므로 기본 off
    diagnose: bool = Field(default=False)
    backtrace: bool = Field(default=True)


def get_logging_config() -> LoggingConfig:
    """LOG_* 환경 변수로 LoggingConfig 생성."""
    return LoggingConfig()
