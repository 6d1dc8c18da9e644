#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Run the Mountdex web API (FastAPI + Uvicorn).

Usage:
  python3 devtools/serve_web.py --host 0.0.0.0 --port 20000
"""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn  # noqa: E402

from apps.mountweb.app import create_app  # noqa: E402
from mountdex.config import load_config  # noqa: E402


def _detect_lan_ip() -> str:
    """Best-effort LAN IP discovery (no external network required)."""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        # doesn't need to be reachable; used to pick outbound interface
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "127.0.0.1"


def main() -> None:
    cfg = load_config()

    parser = argparse.ArgumentParser(description="Mountdex web API (FastAPI) server.")
    parser.add_argument("--dataset", default=str(cfg.dataset_path))
    parser.add_argument("--collection", default=str(cfg.collection_path))
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--root-path", default="", help="Reverse proxy mount path, e.g. /mounts")
    parser.add_argument("--reload-dataset", action="store_true", help="Auto-reload dataset when the file changes")
    parser.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug", "trace"])
    parser.add_argument("--cors-allow-origin", action="append", default=[], help="CORS allow origin (repeatable)")
    args = parser.parse_args()

    level = "DEBUG" if args.log_level == "trace" else args.log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    dataset_path = Path(args.dataset).expanduser().resolve()
    if not dataset_path.exists():
        print(f"Dataset not found: {dataset_path}")
        sys.exit(2)

    app = create_app(
        dataset_path=dataset_path,
        collection_path=Path(args.collection).expanduser().resolve(),
        root_path=args.root_path,
        cors_allow_origins=(args.cors_allow_origin or None),
        gzip_minimum_size=800,
        auto_reload_dataset=bool(args.reload_dataset),
        storage_key=cfg.storage_key,
        fuzzy_threshold=cfg.fuzzy_threshold,
    )

    host = str(args.host)
    port = int(args.port)

    rp = (args.root_path or "").rstrip("/")
    if host == "0.0.0.0":
        print(f"Mountdex API: http://{_detect_lan_ip()}:{port}{rp}/docs")
        print(f"Open (local): http://127.0.0.1:{port}{rp}/docs")
    else:
        print(f"Mountdex API: http://{host}:{port}{rp}/docs")
    print(f"Dataset: {dataset_path}")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=args.log_level,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
