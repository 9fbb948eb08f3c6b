"""
로깅 설정

루트 로거에 콘솔 핸들러와 (선택적으로) 회전 파일 핸들러를 붙입니다.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """루트 로거 설정

    Args:
        level: 로그 레벨 이름 (DEBUG, INFO, ...)
        log_file: 파일 경로. 지정하면 RotatingFileHandler 추가

    Returns:
        설정된 루트 로거
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)

    # 중복 핸들러 방지 (재호출 시)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        root.addHandler(file_handler)

    # httpx/websockets 요청 로그는 한 단계 낮춤
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("websockets").setLevel(max(log_level, logging.WARNING))

    return root
