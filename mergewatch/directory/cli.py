"""Command-line helpers for creating the schema and registering repositories."""

from __future__ import annotations

import argparse
import asyncio
import sys

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from mergewatch.config import ConfigurationError, MergewatchConfig
from mergewatch.directory.errors import DirectoryError
from mergewatch.directory.models import RepositoryRegistration
from mergewatch.directory.service import RepositoryDirectory
from mergewatch.schema import init_database


async def _init_db(database_url: str) -> str:
    engine = create_async_engine(database_url)
    try:
        await init_database(engine)
    finally:
        await engine.dispose()
    return "schema ready"


async def _register(database_url: str, registration: RepositoryRegistration) -> str:
    engine = create_async_engine(database_url)
    try:
        await init_database(engine)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        async with session_factory() as session, session.begin():
            repo, created = await RepositoryDirectory(session).register(registration)
            verb = "registered" if created else "updated"
            summary = (
                f"{verb} {repo.full_name} (id: {repo.github_repo_id}, "
                f"channel: {repo.slack_channel_id or '-'}, "
                f"active: {'yes' if repo.is_active else 'no'})"
            )
    finally:
        await engine.dispose()
    return summary


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mergewatch-directory", description=__doc__
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy async URL; defaults to MERGEWATCH_DATABASE_URL",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create all tables if they are absent")

    register = commands.add_parser(
        "register", help="Add or update a tracked repository"
    )
    register.add_argument("full_name", help="Repository in owner/name form")
    register.add_argument(
        "--github-repo-id",
        type=int,
        required=True,
        help="Stable numeric repository id from the GitHub API",
    )
    register.add_argument(
        "--default-branch", default="main", help="Default branch name"
    )
    register.add_argument(
        "--slack-channel", default=None, help="Team notification channel id"
    )
    register.add_argument(
        "--installation-id", default=None, help="GitHub App installation id"
    )
    register.add_argument(
        "--inactive",
        action="store_true",
        help="Store the repository without tracking its merges",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a directory command.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the command fails.

    """
    args = _build_parser().parse_args(argv)

    try:
        database_url = (
            args.database_url or MergewatchConfig.from_env().require_database_url()
        )
    except (ConfigurationError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.command == "init-db":
        print(asyncio.run(_init_db(database_url)))
        return 0

    registration = RepositoryRegistration(
        github_repo_id=args.github_repo_id,
        full_name=args.full_name,
        default_branch=args.default_branch,
        slack_channel_id=args.slack_channel,
        installation_id=args.installation_id,
        is_active=not args.inactive,
    )
    try:
        print(asyncio.run(_register(database_url, registration)))
    except DirectoryError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
