"""로케일 목록 제공자 — 단일 default / 다중 로케일"""

from __future__ import annotations

from typing import Callable, Iterable, Protocol

from .config import Config

DEFAULT_LOCALE = "default"


class LocaleSource(Protocol):
    def locales(self) -> list[str]: ...


class DefaultLocaleSource:
    """로케일 분할이 없을 때: 항상 ["default"]"""

    def locales(self) -> list[str]:
        return [DEFAULT_LOCALE]


class MultiLocaleSource:
    """
    다중 로케일.

    고정 목록 또는 호출 시점의 목록을 돌려주는 함수를 받음
    (로케일 집합은 호출 사이에 바뀔 수 있음).
    """

    def __init__(self, locales: Iterable[str] | Callable[[], Iterable[str]]):
        if callable(locales):
            self._provider = locales
        else:
            fixed = list(locales)
            self._provider = lambda: fixed

    def locales(self) -> list[str]:
        return list(self._provider())


def locale_source_from_config(config: Config) -> LocaleSource:
    if config.locales:
        return MultiLocaleSource(config.locales)
    return DefaultLocaleSource()
