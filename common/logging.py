"""
로깅 설정

JSON 포맷(python-json-logger) 또는 텍스트 포맷으로 루트 로거를 설정합니다.
crud / database / example 패키지 로거는 패키지별로 레벨을 따로 지정할 수 있습니다.
"""

import logging
import sys
from collections.abc import Mapping

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# 이 프로젝트의 최상위 패키지 (JSON 로그의 component 값)
PACKAGE_LOGGERS = ('crud', 'database', 'example')


def component_of(logger_name: str) -> str:
    """로거 이름의 최상위 패키지 (프로젝트 외부 로거는 'external')"""
    root = logger_name.split('.', 1)[0]
    return root if root in PACKAGE_LOGGERS else 'external'


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON 로그 포매터"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['component'] = component_of(record.name)

        if 'message' not in log_record and record.getMessage():
            log_record['message'] = record.getMessage()


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: str | None = None,
    levels: Mapping[str, str] | None = None,
) -> None:
    """
    로깅 설정

    Args:
        level: 루트 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON 포맷 사용 여부 (False면 텍스트 포맷)
        log_file: 로그 파일 경로 (None이면 stdout만 사용)
        levels: 패키지별 로그 레벨 (예: {'crud': 'DEBUG', 'database': 'WARNING'})

    Raises:
        ValueError: levels에 이 프로젝트 패키지가 아닌 이름이 있을 때
    """
    levels = dict(levels or {})
    unknown = set(levels) - set(PACKAGE_LOGGERS)
    if unknown:
        raise ValueError(f"Unknown logger package(s): {sorted(unknown)}")

    if json_format:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    handlers = [stream_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True  # 기존 설정 덮어쓰기
    )

    # 지정하지 않은 패키지는 루트 레벨을 따른다
    for package in PACKAGE_LOGGERS:
        package_level = levels.get(package)
        logging.getLogger(package).setLevel(
            getattr(logging, package_level.upper()) if package_level else logging.NOTSET
        )

    # 외부 라이브러리 로그 레벨 조정
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('aiosqlite').setLevel(logging.WARNING)
    logging.getLogger('aiosql').setLevel(logging.WARNING)
