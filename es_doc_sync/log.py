"""
es_doc_sync 로깅 설정 (Rich console + plain-text file)

  - Console: RichHandler (markup 지원)
  - File:    FileHandler (plain text, Rich markup 제거)
  - verbose=False면 WARNING 이상만 출력 (진행 로그는 숨김)

사용법:
    from es_doc_sync.log import setup_logging, get_logger

    logger = get_logger("pipeline")
    setup_logging(verbose=True, log_file=Path("logs/reindex.log"))
    logger.info("[bold green]완료![/bold green]")
"""

import logging
from pathlib import Path

from rich.logging import RichHandler
from rich.text import Text

PKG_NAME = "es_doc_sync"


class _PlainFormatter(logging.Formatter):
    """FileHandler용 Formatter — "[bold]완료[/bold]" → "완료" """

    def format(self, record: logging.LogRecord) -> str:
        original_msg = record.msg
        try:
            record.msg = Text.from_markup(str(record.msg)).plain
        except (ValueError, KeyError, AttributeError):
            pass
        result = super().format(record)
        record.msg = original_msg
        return result


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """
    패키지 루트 로거에 핸들러를 설정.

    - RichHandler: 첫 호출 시 1회만 추가
    - FileHandler: log_file 인자가 있을 때마다 추가

    Args:
        verbose:  True면 INFO, False면 WARNING
        log_file: 로그 파일 경로 (None이면 콘솔만)

    Returns:
        패키지 루트 로거
    """
    level = logging.INFO if verbose else logging.WARNING
    logger = logging.getLogger(PKG_NAME)
    logger.setLevel(level)

    has_rich = any(isinstance(h, RichHandler) for h in logger.handlers)
    if not has_rich:
        console = RichHandler(
            rich_tracebacks=True,
            show_path=False,
            markup=True,
            log_time_format="[%H:%M:%S]",
        )
        logger.addHandler(console)

    for h in logger.handlers:
        if isinstance(h, RichHandler):
            h.setLevel(level)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(_PlainFormatter("%(asctime)s  %(name)s  %(message)s"))
        fh.setLevel(level)
        logger.addHandler(fh)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    패키지 하위 로거 반환.

    예: get_logger("pipeline") → logging.getLogger("es_doc_sync.pipeline")
    """
    if name:
        return logging.getLogger(f"{PKG_NAME}.{name}")
    return logging.getLogger(PKG_NAME)
