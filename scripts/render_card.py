"""Render a repository preview card to a PNG file without running the server."""
import argparse
import asyncio
import locale
import os
import sys

from repocard.card import compose, rank_languages
from repocard.connectors import GitHubClient


async def render(owner: str, repo: str, out_path: str) -> int:
    client = GitHubClient()
    metadata = await client.fetch_repository(owner, repo)
    if metadata is None:
        print(f"Repository {owner}/{repo} not found or rate limit exceeded", file=sys.stderr)
        return 1

    languages = await client.fetch_languages(owner, repo)
    img = compose(metadata, rank_languages(languages, metadata.language))
    img.save(out_path, "PNG")
    print(f"Saved {out_path}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Render a GitHub repository preview card")
    parser.add_argument("username", help="Repository owner")
    parser.add_argument("repo", help="Repository name")
    parser.add_argument("--out", "-o", help="Output path (default: <owner>-<repo>.png)")
    args = parser.parse_args()

    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error:
        pass

    out_path = args.out or os.path.join(os.getcwd(), f"{args.username}-{args.repo}.png")
    sys.exit(asyncio.run(render(args.username, args.repo, out_path)))


if __name__ == "__main__":
    main()
