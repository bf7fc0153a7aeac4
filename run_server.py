#!/usr/bin/env python3
"""
repocard server launcher

    python run_server.py --port 8000

Set GITHUB_TOKEN to raise the upstream rate ceiling, STAR_REPO to choose
which repository /api/stars reports.
"""

import argparse
import locale
import os


def main():
    parser = argparse.ArgumentParser(
        description="Serve repository preview cards and the star counter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_server.py
  python run_server.py --port 3000 --star-repo octocat/hello-world
  python run_server.py --dev
        """,
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--star-repo", help="owner/name reported by /api/stars")
    parser.add_argument("--dev", action="store_true", help="Enable /docs and /redoc")
    args = parser.parse_args()

    if args.star_repo:
        os.environ["STAR_REPO"] = args.star_repo
    if args.dev:
        os.environ.setdefault("ENV", "dev")

    # Card dates use the host locale's short date format
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error:
        pass

    if not os.environ.get("GITHUB_TOKEN"):
        print("Note: GITHUB_TOKEN not set; GitHub calls are unauthenticated (60 req/hr).")

    print(f"Starting repocard on http://localhost:{args.port}")

    import uvicorn
    uvicorn.run("repocard.main:app", host=args.host, port=args.port, reload=False)


if __name__ == "__main__":
    main()
