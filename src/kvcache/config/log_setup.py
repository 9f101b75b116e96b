"""structlog 설정"""

import logging
import sys
from typing import Optional

import structlog

from .settings import LoggingConfig


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    구조화된 로깅 설정

    표준 logging 위에 structlog 프로세서 체인을 구성합니다.
    json_logs가 켜져 있으면 JSON, 아니면 콘솔 렌더러를 사용합니다.
    """
    config = config or LoggingConfig.from_env()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if config.json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
