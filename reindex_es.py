#!/usr/bin/env python3
# reindex_es.py
"""
문서 → Elasticsearch 로케일 인덱스 전체 재색인 (CLI 엔트리포인트)

정상 운영 중에는 문서 저장 시 단건 인덱싱으로 동기화되므로
이 작업은 최초 1회 (또는 필드/settings 변경 후)만 필요합니다.

실행:
  # 로케일 분할 없음 → "default" 인덱스 하나
  python reindex_es.py --documents data/docs.jsonl --verbose

  # 로케일별 인덱스 + settings
  python reindex_es.py --documents data/docs.jsonl \\
      --locales en fr fr-draft --settings settings.json

  # ES 클러스터 + fingerprint 인증
  python reindex_es.py --documents data/docs.jsonl \\
      --es_nodes https://es01:9200 https://es02:9200 \\
      --es_fingerprint "B1:2A:96:..." \\
      --es_username elastic --es_password changeme

settings.json 예:
  {"index_settings": {...}, "analyzer": {...},
   "locale_index_settings": {"fr": {...}}, "analyzers": {"fr": {...}}}
"""

import argparse
import json
import sys
from pathlib import Path

from es_doc_sync import Config, run_reindex
from es_doc_sync.log import get_logger

SETTINGS_KEYS = ("index_settings", "analyzer", "locale_index_settings", "analyzers")

logger = get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="문서 → Elasticsearch 로케일 인덱스 재색인 (reindex)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="진행 로그 출력")

    # ── 데이터 소스 ──
    data = parser.add_argument_group("데이터 소스")
    data.add_argument("--documents", type=Path, required=True, help="문서 JSONL 파일 (1줄 = 1 문서)")
    data.add_argument("--batch_size", type=int, default=100)

    # ── 인덱스 ──
    index = parser.add_argument_group("인덱스")
    index.add_argument("--base_name", default="site", help="인덱스 이름 prefix")
    index.add_argument("--fields", nargs="+", default=None, help="인덱싱 필드 (기본 필드 대체)")
    index.add_argument("--add_fields", nargs="+", default=[], help="기본 필드에 추가할 필드")
    index.add_argument("--locale_field", default="workflowLocale")
    index.add_argument("--locales", nargs="+", default=None, help="로케일 목록 (미지정 시 default)")
    index.add_argument(
        "--settings", type=Path, default=None,
        help="settings JSON 파일 (index_settings / analyzer / locale_index_settings / analyzers)",
    )

    # ── ES 연결 ──
    es = parser.add_argument_group("Elasticsearch 연결")
    es.add_argument("--es_url", default="http://localhost:9200")
    es.add_argument("--es_host", default=None)
    es.add_argument("--es_port", type=int, default=None)
    es.add_argument("--es_nodes", nargs="+", default=None, help="클러스터 노드 URL 목록 (설정 시 --es_url 무시)")
    es.add_argument("--es_fingerprint", default=None, help="TLS 인증서 SHA-256 fingerprint (--es_nodes 사용 시 필수)")
    es.add_argument("--es_username", default=None)
    es.add_argument("--es_password", default=None)
    es.add_argument("--es_api_key", default=None)

    parser.add_argument("--log_file", type=Path, default=None, help="로그 파일 경로")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    config_kwargs = {
        "documents_path": args.documents,
        "batch_size": args.batch_size,
        "base_name": args.base_name,
        "add_fields": args.add_fields,
        "locale_field": args.locale_field,
        "locales": args.locales,
        "es_url": args.es_url,
        "es_host": args.es_host,
        "es_port": args.es_port,
        "es_nodes": args.es_nodes,
        "es_fingerprint": args.es_fingerprint,
        "es_username": args.es_username,
        "es_password": args.es_password,
        "es_api_key": args.es_api_key,
        "log_path": args.log_file,
        "verbose": args.verbose,
    }
    if args.fields:
        config_kwargs["fields"] = args.fields
    if args.settings:
        settings = json.loads(args.settings.read_text(encoding="utf-8"))
        for key in SETTINGS_KEYS:
            if settings.get(key) is not None:
                config_kwargs[key] = settings[key]
    return Config(**config_kwargs)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run_reindex(config_from_args(args))
    except Exception as e:
        logger.error(f"[bold red]reindex 실패[/bold red]: {type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
