"""문서 → 인덱싱 body 변환 (필드 선택 + Exact 섀도 필드)"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Iterable

from .config import EXACT_MAX_BYTES, EXACT_SUFFIX

_SCALARS = (str, int, float, bool, type(None))


def is_flat(value: Any) -> bool:
    """스칼라, 또는 첫 원소가 복합 구조가 아닌 배열이면 True"""
    if isinstance(value, (list, tuple)):
        return not value or not isinstance(value[0], (Mapping, list, tuple))
    return isinstance(value, _SCALARS)


def _serialized_size(value: Any) -> int:
    return len(json.dumps(value, ensure_ascii=False, default=str).encode("utf-8"))


def project_fields(
    doc: Mapping[str, Any],
    fields: Iterable[str],
    exact_max_bytes: int = EXACT_MAX_BYTES,
) -> dict[str, Any]:
    """
    문서에서 설정된 필드만 골라 인덱싱 body 생성.

    - 중첩 객체 / 객체 배열은 분석할 수 없으므로 조용히 건너뜀
    - 포함된 필드마다 정확 일치 검색용 <field>Exact 를 추가.
      값이 비어 있거나 직렬화 크기가 exact_max_bytes 미만일 때만.
    - _id 는 bulk action 쪽에 들어가므로 body에서 제외
    """
    body: dict[str, Any] = {}
    for name in fields:
        if name == "_id" or name not in doc:
            continue
        value = doc[name]
        if not is_flat(value):
            continue
        body[name] = value
        if not value or _serialized_size(value) < exact_max_bytes:
            body[name + EXACT_SUFFIX] = value
    return body
