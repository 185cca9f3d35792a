#!/usr/bin/env python
"""
Launcher for the autocommitter server.

Puts `src/` on the path, loads `.env`, configures logging and serves the
FastAPI app with uvicorn.
"""

import importlib.util
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

# Import name -> distribution name
REQUIRED = {
    "dotenv": "python-dotenv",
    "uvicorn": "uvicorn",
    "fastapi": "fastapi",
    "git": "GitPython",
    "httpx": "httpx",
}


def check_dependencies() -> None:
    missing = [dist for module, dist in REQUIRED.items() if importlib.util.find_spec(module) is None]
    if missing:
        print(f"❌ Missing packages: {', '.join(missing)}")
        print("   Install the project first:  pip install -e .")
        sys.exit(1)


def print_summary(settings) -> None:
    primary = settings.primary_provider.display_name if settings.primary_provider else "not set"
    backups = ", ".join(b.display_name for b in settings.backup_providers) or "none"
    bump = settings.version_increment.value if settings.version_bumping_enabled else "off"

    print(f"\n🤖 autocommitter watching {settings.repo_path}")
    print(f"   providers: {primary} (backups: {backups})")
    print(f"   timers:    every {settings.commit_interval}s, after {settings.inactivity_delay}s idle")
    print(f"   version:   {bump}, push: {'on' if settings.auto_push else 'off'}")
    if settings.primary_provider is None:
        print("⚠️  AUTOCOMMITTER_PRIMARY_PROVIDER is not set; runs will skip committing")
    print(f"🚀 http://{settings.host}:{settings.port}  (health: /health)\n")


def main():
    check_dependencies()

    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()

    from autocommitter.config import Settings
    from autocommitter.logging_config import configure_logging
    from autocommitter.main import create_app

    configure_logging()
    settings = Settings.from_env()
    print_summary(settings)

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    main()
