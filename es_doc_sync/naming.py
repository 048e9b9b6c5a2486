"""로케일 → 물리 인덱스 이름"""

from __future__ import annotations

import re

_NON_LETTERS = re.compile(r"[^a-z]")


class LocaleCollisionError(ValueError):
    """서로 다른 로케일이 같은 인덱스 이름으로 접히는 설정 오류"""

    def __init__(self, locale: str, other: str, index_name: str):
        super().__init__(
            f"로케일 {locale!r} 과 {other!r} 은 소문자 알파벳만으로 구분할 수 없습니다 "
            f"(인덱스 {index_name!r}). Elasticsearch 인덱스 이름에는 다른 문자를 쓸 수 없습니다."
        )
        self.locale = locale
        self.other = other
        self.index_name = index_name


class LocaleIndexNamer:
    """
    로케일 이름을 인덱스 이름으로 변환하고 충돌을 감지.

    seen 테이블(인덱스 이름 → 처음 만든 로케일)은 추가만 되며 지워지지 않음.
    실제로 사용된 로케일끼리만 비교하므로 충돌은 둘 다 처음 쓰일 때 드러남.
    """

    def __init__(self, doc_index: str, seen: dict[str, str] | None = None):
        self.doc_index = doc_index
        self.seen = {} if seen is None else seen

    @property
    def prefix(self) -> str:
        return self.doc_index

    def index_for(self, locale: str) -> str:
        locale = locale.lower()
        index_name = self.doc_index + _NON_LETTERS.sub("", locale)
        other = self.seen.setdefault(index_name, locale)
        if other != locale:
            raise LocaleCollisionError(locale, other, index_name)
        return index_name
