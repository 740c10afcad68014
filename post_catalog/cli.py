"""Command line interface for post_catalog.

    post-catalog validate [DIR]
    post-catalog build [--output DIR] [--include-drafts]
    post-catalog list [--include-drafts]
    post-catalog serve [--transport ...]
"""

import sys
from pathlib import Path
from typing import Optional

import click

from post_catalog.config import get_config
from post_catalog.errors import BuildError
from post_catalog.logging_config import setup_logging
from post_catalog.services.loader import load_collection, select_published
from post_catalog.services.renderer import SiteInfo
from post_catalog.services.site_builder import build_site
from post_catalog.services.validator import validate_collection
from post_catalog.server.app import main as serve


def _format_issue(issue) -> str:
    location = f"{issue.path}:{issue.line}" if issue.line else issue.path
    return f"{location}: [{issue.code}] {issue.message}"


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """Index, check and render a directory of Markdown posts."""
    config = get_config()
    if log_level:
        config.log_level = log_level
    setup_logging(config)
    ctx.obj = config


@cli.command()
@click.argument("directory", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.pass_obj
def validate(config, directory: Optional[Path]) -> None:
    """Check every document for well-formed front matter and code fences."""
    content_dir = directory or Path(config.content_dir)
    try:
        issues = validate_collection(content_dir)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    for issue in issues:
        click.echo(_format_issue(issue))

    if issues:
        click.echo(f"{len(issues)} issue(s) found", err=True)
        sys.exit(1)
    click.echo("All documents are valid")


@cli.command()
@click.option("--content", "content_dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Content directory")
@click.option("--output", "output_dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--include-drafts", is_flag=True, help="Render drafts too")
@click.pass_obj
def build(config, content_dir: Optional[Path], output_dir: Optional[Path], include_drafts: bool) -> None:
    """Render the published posts to a static site."""
    site = SiteInfo(title=config.site_title, base_url=config.base_url)
    try:
        result = build_site(
            content_dir or Path(config.content_dir),
            output_dir or Path(config.output_dir),
            site,
            include_drafts=include_drafts,
        )
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except BuildError as e:
        for issue in e.issues:
            click.echo(_format_issue(issue), err=True)
        raise click.ClickException(str(e))

    click.echo(
        f"Wrote {result.post_count} page(s) to {result.output_dir}"
        f" ({len(result.drafts_skipped)} draft(s) skipped)"
    )


@cli.command(name="list")
@click.option("--content", "content_dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Content directory")
@click.option("--include-drafts", is_flag=True, help="List drafts too")
@click.pass_obj
def list_command(config, content_dir: Optional[Path], include_drafts: bool) -> None:
    """List posts, newest first."""
    try:
        loaded = load_collection(content_dir or Path(config.content_dir))
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    for post in select_published(loaded.posts, include_drafts=include_drafts):
        marker = " (draft)" if post.draft else ""
        click.echo(f"{post.date:%Y-%m-%d}  {post.slug}  {post.title}{marker}")

    for issue in loaded.errors:
        click.echo(_format_issue(issue), err=True)


cli.add_command(serve, name="serve")


if __name__ == "__main__":
    cli()
