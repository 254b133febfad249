import threading
import time
import os
import sys
import webbrowser
from pathlib import Path

import uvicorn

from toolshelf.config import Settings, configure_logging

PACKAGE_DIR = Path(__file__).resolve().parent / "toolshelf"


def watched_files():
    return sorted(PACKAGE_DIR.glob("*.py"))


def run_uvicorn(settings: Settings):
    """
    Run the FastAPI app via uvicorn in this process
    (called in a background thread).
    """
    config = uvicorn.Config(
        "toolshelf.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=False,  # we are doing our own watch/restart
    )
    server = uvicorn.Server(config)
    server.run()


def open_browser_once(settings: Settings):
    url = f"http://{settings.host}:{settings.port}/docs"
    print(f"[server] Opening {url}")
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        pass


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    t = threading.Thread(target=run_uvicorn, args=(settings,), daemon=True)
    t.start()

    # give it a moment to boot before opening browser
    time.sleep(1.0)
    open_browser_once(settings)

    mtimes = {p: p.stat().st_mtime for p in watched_files()}

    print("[server] Watching for changes. Press Ctrl+C to quit.")

    try:
        while True:
            time.sleep(1.0)
            for p in watched_files():
                if not p.exists():
                    continue
                new_mtime = p.stat().st_mtime
                old_mtime = mtimes.get(p)
                if old_mtime is None:
                    mtimes[p] = new_mtime
                    continue
                if new_mtime != old_mtime:
                    print(f"\n[server] Detected change in {p.name}")
                    ans = input(
                        "Apply changes and restart server? [y/N]: "
                    ).strip().lower()
                    mtimes[p] = new_mtime
                    if ans == "y":
                        print("[server] Restarting with new code...")
                        # pending deletes are lost on restart; the store keeps the entry
                        os.execv(sys.executable, [sys.executable] + sys.argv)
                    else:
                        print("[server] Ignoring change. Continuing...")
    except KeyboardInterrupt:
        print("\n[server] Shutting down.")


if __name__ == "__main__":
    main()
