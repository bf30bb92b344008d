"""Creepy Companion API: dev launcher. Starts the backend in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "3001")


def main():
    parser = argparse.ArgumentParser(description="Creepy Companion API dev launcher")
    parser.add_argument("--port", default=BACKEND_PORT, help=f"Port to serve on (default: {BACKEND_PORT})")
    parser.add_argument("--no-ai", action="store_true",
                        help="Run without AI keys (sounds use fallback rules, generation returns 500)")
    args = parser.parse_args()

    env = os.environ.copy()
    if args.no_ai:
        for key in ("RUNPOD_API_KEY", "ANTHROPIC_API_KEY", "FEATHERLESS_API_KEY"):
            env[key] = ""  # load_dotenv never overrides a set variable

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting backend on http://localhost:{args.port} ...")
    procs.append(subprocess.Popen(
        ["uv", "run", "uvicorn", "creepy_companion.app:app", "--reload", "--host", HOST, "--port", str(args.port)],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
