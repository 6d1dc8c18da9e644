#!/usr/bin/env python3
"""Mountdex tool registry."""

TOOLS = [
    # --- CLI tools (apps/cli) ---
    {
        "file": "dash.py",
        "alias": "dash",
        "desc": "Mountdex dashboard (dataset + collection overview)",
        "usage": "mountdex dash",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "doctor.py",
        "alias": "doctor",
        "desc": "Configuration, dataset and storage health check",
        "usage": "mountdex doctor [--enforce] [--strict]",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "mounts.py",
        "alias": "mounts",
        "desc": "Browse the catalog: search, show, expansion, filter",
        "usage": "mountdex mounts <search|show|expansion|filter> ...",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "collection.py",
        "alias": "collection",
        "desc": "Manage owned mounts: own/unown/toggle/stats/reconcile/export/import/note",
        "usage": "mountdex collection <own|unown|toggle|list|stats|reconcile|export|import|note> ...",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },

    # --- dev tools (devtools/) ---
    {
        "file": "build_mount_index.py",
        "alias": "index",
        "desc": "Build the compact mount index document (listing + expansion buckets)",
        "usage": "mountdex index [--dataset PATH] [--out PATH] [--dry-run]",
        "type": "Dev",
        "folder": "devtools"
    },
    {
        "file": "serve_web.py",
        "alias": "web",
        "desc": "Start the mount web API (FastAPI + Uvicorn)",
        "usage": "mountdex web [--host 0.0.0.0 --port 20000]",
        "type": "Dev",
        "folder": "devtools"
    },
]

def get_tools():
    return TOOLS
