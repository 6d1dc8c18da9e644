#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Build mount index (compact listing + expansion buckets)."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mountdex.dataset import DatasetStore  # noqa: E402
from mountdex.errors import LoadError  # noqa: E402
from mountdex.indexers.mount_index import build_index, build_index_document, render_index_summary  # noqa: E402


def main() -> int:
    p = argparse.ArgumentParser(description="Build Mountdex index (compact listing + expansion buckets)")
    p.add_argument("--dataset", default="data/mounts.json", help="Dataset JSON path")
    p.add_argument("--out", default="data/index/mountdex_index_v1.json", help="Output JSON path")
    p.add_argument("--summary", default="data/index/mountdex_index_summary.md", help="Output summary Markdown")
    p.add_argument("--dry-run", action="store_true", help="Print the summary without writing files")

    args = p.parse_args()

    dataset_path = (PROJECT_ROOT / args.dataset).resolve()
    if not dataset_path.exists():
        raise SystemExit(f"Dataset not found: {dataset_path}")

    store = DatasetStore(dataset_path)
    try:
        store.load()
    except LoadError as e:
        raise SystemExit(f"Dataset invalid: {e}")

    index_doc = build_index_document(build_index(store.snapshot()))
    summary = render_index_summary(index_doc)

    if args.dry_run:
        print(summary)
        return 0

    out_path = (PROJECT_ROOT / args.out).resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(index_doc, ensure_ascii=False, indent=2), encoding="utf-8")

    summary_path = (PROJECT_ROOT / args.summary).resolve()
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    summary_path.write_text(summary, encoding="utf-8")

    print(f"OK: Mount index written: {out_path}")
    print(f"OK: Summary written: {summary_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
