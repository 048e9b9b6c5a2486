"""인덱스 settings 레이어 병합 + 필드 mappings"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any, Iterable

from .config import EXACT_SUFFIX, Config

_DRAFT_SUFFIX = re.compile(r"-draft$")


def deep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    settings 레이어를 왼쪽 → 오른쪽 순서로 재귀 병합.

    양쪽 모두 dict인 키는 재귀 병합, 그 외에는 뒤 레이어 값이 덮어씀.
    입력 레이어는 변경하지 않음.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = copy.deepcopy(value)
    return merged


def base_locale(locale: str) -> str:
    """"fr-draft" → "fr" """
    return _DRAFT_SUFFIX.sub("", locale)


def _analyzer_layer(analyzer: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not analyzer:
        return None
    return {"analysis": {"analyzer": analyzer}}


def locale_settings(config: Config, locale: str) -> dict[str, Any]:
    """
    로케일 인덱스의 settings.

    우선순위 (낮음 → 높음):
      1. index_settings          전역 settings
      2. analyzer                전역 analyzer
      3. locale_index_settings   로케일별 settings (-draft 제거한 로케일 기준)
      4. analyzers               로케일별 analyzer
    """
    locale = base_locale(locale)
    return deep_merge(
        config.index_settings,
        _analyzer_layer(config.analyzer),
        config.locale_index_settings.get(locale),
        _analyzer_layer(config.analyzers.get(locale)),
    )


def build_mappings(fields: Iterable[str]) -> dict[str, Any]:
    """필드는 text(전문 검색), <field>Exact 는 keyword(정확 일치)"""
    properties: dict[str, Any] = {}
    for name in fields:
        if name == "_id":
            continue
        properties[name] = {"type": "text"}
        properties[name + EXACT_SUFFIX] = {"type": "keyword"}
    return {"properties": properties}
