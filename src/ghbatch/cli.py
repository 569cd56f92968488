"""Command line interface: atomic pushes and deletes against a GitHub branch"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import click

from . import pathutil
from .batch import Batch, new_batch
from .configuration import GitHubConfig, load_environment_variables
from .error_handling import GitHubBatchError
from .github import (
    GitHubObjectStore,
    branch_exists,
    create_branch,
    get_branch_sha,
    get_github_client,
    parse_repo_url,
)
from .logging_config import configure_logging
from .models import CommitAuthor

logger = logging.getLogger(__name__)


def read_local_files(source_dir: Path, prefix: str = "") -> List[Tuple[str, bytes]]:
    """Read every file under ``source_dir`` as ``(repository path, content)``.

    Repository paths are relative to ``source_dir``, placed under ``prefix``
    and use forward slashes.
    """
    files = []
    for file_path in sorted(source_dir.rglob("*")):
        if not file_path.is_file():
            continue
        relative = file_path.relative_to(source_dir).as_posix()
        files.append((pathutil.join(prefix, relative), file_path.read_bytes()))
    return files


def _resolve_config(repo: Optional[str], branch: Optional[str]) -> GitHubConfig:
    config = GitHubConfig.from_env()
    updates = {}
    if repo:
        try:
            updates["owner"], updates["repo"] = parse_repo_url(repo)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--repo")
    if branch:
        updates["branch"] = branch
    if updates:
        config = config.model_copy(update=updates)

    try:
        config.check_required()
    except GitHubBatchError as e:
        raise click.ClickException(f"Configuration error: {e}")
    return config


async def _run_batch(
    config: GitHubConfig,
    message: str,
    populate: Callable[[Batch], None],
    author: Optional[CommitAuthor] = None,
    create_from: Optional[str] = None,
) -> Optional[str]:
    client = get_github_client(config)
    if client is None:
        raise click.ClickException("GitHub token not configured. Set GITHUB_TOKEN.")

    async with client:
        if create_from and not await branch_exists(client, config.owner, config.repo, config.branch):
            base_sha = await get_branch_sha(client, config.owner, config.repo, create_from)
            await create_branch(client, config.owner, config.repo, config.branch, base_sha)

        batch = new_batch(
            GitHubObjectStore(client),
            config.owner,
            config.repo,
            config.branch,
            message,
            author=author,
        )
        populate(batch)
        logger.info(f"Committing {len(batch)} queued operations")
        return await batch.commit()


def _execute(config: GitHubConfig, message: str, populate, **kwargs) -> None:
    try:
        sha = asyncio.run(_run_batch(config, message, populate, **kwargs))
    except (GitHubBatchError, ValueError) as e:
        raise click.ClickException(str(e))

    if sha is None:
        click.echo("nothing to commit")
    else:
        click.echo(sha)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("--json-logs", is_flag=True, help="Emit structured JSON log lines")
@click.option(
    "--env-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding an extra .env file",
)
def main(verbose: int, json_logs: bool, env_dir: Optional[Path]) -> None:
    """ghbatch - atomic multi-file commits to GitHub branches"""
    logging_level = "WARNING"
    if verbose == 1:
        logging_level = "INFO"
    elif verbose >= 2:
        logging_level = "DEBUG"
    configure_logging(logging_level, structured=json_logs)

    load_environment_variables(env_dir)


@main.command()
@click.argument(
    "source_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--repo", "-r", help="Repository as OWNER/REPO or URL")
@click.option("--branch", "-b", help="Target branch (default from GITHUB_BRANCH or main)")
@click.option("--prefix", default="", help="Repository directory to place files under")
@click.option("--message", "-m", default="", help="Commit message")
@click.option("--delete", "deletes", multiple=True, help="Repository path to delete (repeatable)")
@click.option("--author-name", help="Commit author name")
@click.option("--author-email", help="Commit author email")
@click.option("--create-from", help="Create the target branch from this branch if missing")
def push(
    source_dir: Path,
    repo: Optional[str],
    branch: Optional[str],
    prefix: str,
    message: str,
    deletes: Tuple[str, ...],
    author_name: Optional[str],
    author_email: Optional[str],
    create_from: Optional[str],
) -> None:
    """Upload SOURCE_DIR (and queued deletes) as a single commit."""
    config = _resolve_config(repo, branch)

    author = None
    if author_name or author_email:
        if not (author_name and author_email):
            raise click.UsageError("--author-name and --author-email must be given together")
        author = CommitAuthor(name=author_name, email=author_email)

    files = read_local_files(source_dir, prefix)

    def populate(batch: Batch) -> None:
        for path, content in files:
            batch.write(path, content)
        for path in deletes:
            batch.delete(path)

    _execute(config, message, populate, author=author, create_from=create_from)


@main.command("rm")
@click.argument("paths", nargs=-1, required=True)
@click.option("--repo", "-r", help="Repository as OWNER/REPO or URL")
@click.option("--branch", "-b", help="Target branch (default from GITHUB_BRANCH or main)")
@click.option("--message", "-m", default="", help="Commit message")
def remove(paths: Tuple[str, ...], repo: Optional[str], branch: Optional[str], message: str) -> None:
    """Delete PATHS from the branch in a single commit."""
    config = _resolve_config(repo, branch)

    def populate(batch: Batch) -> None:
        for path in paths:
            batch.delete(path)

    _execute(config, message, populate)


if __name__ == "__main__":
    main()
