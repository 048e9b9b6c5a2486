"""문서 → bulk 명령 (action, body) 생성"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, NamedTuple

from .config import EXACT_MAX_BYTES
from .locales import LocaleSource
from .naming import LocaleIndexNamer
from .projector import project_fields


class BulkCommand(NamedTuple):
    """bulk API의 index action 설명 + 문서 body 한 쌍"""

    action: dict[str, Any]
    body: dict[str, Any]

    @property
    def index(self) -> str:
        return self.action["index"]["_index"]

    @property
    def doc_id(self) -> str:
        return self.action["index"]["_id"]

    def to_action(self) -> dict[str, Any]:
        """elasticsearch.helpers.async_bulk 용 action"""
        return {
            "_op_type": "index",
            "_index": self.index,
            "_id": self.doc_id,
            "_source": self.body,
        }


def to_actions(commands: Iterable[BulkCommand]) -> list[dict[str, Any]]:
    return [c.to_action() for c in commands]


class BulkCommandBuilder:
    """
    문서 하나를 로케일 인덱스별 bulk 명령으로 변환.

    - 로케일 속성이 있는 문서 → 해당 로케일 인덱스 하나
    - 로케일 속성이 없는 문서 → 현재 알려진 모든 로케일 인덱스에 복제
      (어떤 로케일 필터에서도 검색되도록)

    body는 로케일과 무관하므로 한 번만 만들어 모든 명령이 공유.
    """

    def __init__(
        self,
        fields: list[str],
        namer: LocaleIndexNamer,
        locale_source: LocaleSource,
        locale_field: str = "workflowLocale",
        exact_max_bytes: int = EXACT_MAX_BYTES,
    ):
        self.fields = fields
        self.namer = namer
        self.locale_source = locale_source
        self.locale_field = locale_field
        self.exact_max_bytes = exact_max_bytes

    def target_locales(self, doc: Mapping[str, Any]) -> list[str]:
        locale = doc.get(self.locale_field)
        if locale:
            return [locale]
        return self.locale_source.locales()

    def commands_for(self, doc: Mapping[str, Any]) -> list[BulkCommand]:
        body = project_fields(doc, self.fields, self.exact_max_bytes)
        doc_id = str(doc["_id"])
        return [
            BulkCommand(
                {"index": {"_index": self.namer.index_for(locale), "_id": doc_id}},
                body,
            )
            for locale in self.target_locales(doc)
        ]

    def commands_for_many(self, docs: Iterable[Mapping[str, Any]]) -> list[BulkCommand]:
        return [c for doc in docs for c in self.commands_for(doc)]
