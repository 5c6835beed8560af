"""pdir - prompt directory CLI."""

from __future__ import annotations

import datetime
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import BaseModel, ValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from sqlalchemy.orm import Session

from pdir import __version__
from pdir.config import BOOT_RECENT_LIMIT, default_db_path
from pdir.database import Database
from pdir.schemas.blog import BlogCreate, BlogOut, BlogUpdate
from pdir.schemas.category import CategoryOut
from pdir.schemas.prompt import PromptCreate, PromptOut, PromptQuery, PromptSummary, PromptUpdate
from pdir.schemas.user import Identity, UserOut
from pdir.services.blog_service import BlogService
from pdir.services.category_service import CategoryService
from pdir.services.exceptions import DirectoryError
from pdir.services.favorite_service import FavoriteService
from pdir.services.prompt_service import PromptService
from pdir.services.seed_service import SeedService
from pdir.services.text import generate_slug
from pdir.services.user_service import UserService


def _version_callback(value: bool) -> None:
    if value:
        print(f"pdir {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="pdir",
    help="prompt-directory: a searchable catalog of prompts and blog posts.",
    add_completion=False,
    no_args_is_help=True,
)
prompt_app = typer.Typer(help="Browse, submit and moderate prompts.", no_args_is_help=True)
blog_app = typer.Typer(help="Read and edit blog posts.", no_args_is_help=True)
category_app = typer.Typer(help="Prompt categories.", no_args_is_help=True)
favorite_app = typer.Typer(help="Your saved prompts.", no_args_is_help=True)
user_app = typer.Typer(help="User records and identity-provider events.", no_args_is_help=True)
app.add_typer(prompt_app, name="prompt")
app.add_typer(blog_app, name="blog")
app.add_typer(category_app, name="category")
app.add_typer(favorite_app, name="favorite")
app.add_typer(user_app, name="user")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-V", help="Log service activity to stderr.")
    ] = False,
) -> None:
    """prompt-directory: a searchable catalog of prompts and blog posts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


console = Console()

DbOption = Annotated[
    Path | None,
    typer.Option("--db", envvar="PDIR_DB", help="Override path to SQLite database."),
]
AsOption = Annotated[
    str | None,
    typer.Option("--as", envvar="PDIR_USER", help="Act as this identity-provider subject."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]


def _db_path(db: Path | None) -> Path:
    return db if db is not None else default_db_path()


def _identity(subject: str | None) -> Identity | None:
    return Identity(subject=subject) if subject else None


@contextmanager
def _session(db: Path | None) -> Iterator[Session]:
    """Open the database, yield one unit of work and report service errors."""
    database = Database(_db_path(db))
    try:
        database.init()
        with database.unit_of_work() as session:
            yield session
    except (DirectoryError, ValidationError, json.JSONDecodeError) as exc:
        rprint(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None
    finally:
        database.dispose()


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def _fmt_ms(value: int | None) -> str:
    if not value:
        return ""
    return datetime.datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M")


def _read_content(content: str | None, file: Path | None) -> str | None:
    if content and file:
        rprint("[red]Error:[/red] Provide --content or --file, not both.")
        raise typer.Exit(1) from None
    if file:
        if not file.exists():
            rprint(f"[red]Error:[/red] File not found: {file}")
            raise typer.Exit(1) from None
        return file.read_text(encoding="utf-8")
    if content == "-":
        return sys.stdin.read()
    return content


def _prompt_table(title: str, prompts: list[PromptSummary]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Category")
    table.add_column("Author")
    table.add_column("Uses", justify="right")
    table.add_column("Runs", justify="right")
    table.add_column("★", justify="center")
    for p in prompts:
        table.add_row(
            p.id,
            p.title,
            p.category,
            p.author_name,
            str(p.usage_count),
            str(p.execution_count),
            "★" if p.featured else "",
        )
    return table


# ------------------------------------------------------------------
# init / seed / boot
# ------------------------------------------------------------------


@app.command()
def init(db: DbOption = None) -> None:
    """Initialize the pdir database."""
    path = _db_path(db)
    database = Database(path)
    try:
        database.init()
    finally:
        database.dispose()
    rprint(f"[green]✓[/green] Database initialized at [bold]{path}[/bold]")


@app.command()
def seed(
    file: Annotated[Path, typer.Argument(help="JSON file with categories, users and prompts.")],
    db: DbOption = None,
) -> None:
    """Load categories, users and prompts from a JSON file (safe to re-run)."""
    if not file.exists():
        rprint(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1) from None
    with _session(db) as session:
        counts = SeedService(session).seed_file(file)
    rprint(
        f"[green]✓[/green] Seeded {counts['categories']} categories, "
        f"{counts['users']} users, {counts['prompts']} prompts"
    )


@app.command()
def boot(
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Recent prompts to include.")
    ] = BOOT_RECENT_LIMIT,
    db: DbOption = None,
) -> None:
    """Print the directory boot data (categories and recent prompts) as JSON."""
    with _session(db) as session:
        data = PromptService(session).get_boot_data(limit=limit)
        _echo_json(_dump(data))


# ------------------------------------------------------------------
# prompt
# ------------------------------------------------------------------


@prompt_app.command("list")
def list_prompts(
    category: Annotated[
        list[str] | None,
        typer.Option("--category", "-c", help="Category id; repeat to match any of several."),
    ] = None,
    search: Annotated[str | None, typer.Option("--search", "-s", help="Search text.")] = None,
    sort: Annotated[
        str | None, typer.Option("--sort", help="usage, recent or featured.")
    ] = None,
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Max results.")] = None,
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """List approved prompts."""
    categories = category or []
    query = PromptQuery(
        category=categories[0] if len(categories) == 1 else None,
        categories=categories if len(categories) > 1 else None,
        search=search,
        sort=sort,
        limit=limit,
    )
    with _session(db) as session:
        prompts = PromptService(session).get_approved_prompts(query)
        if json_output:
            _echo_json([_dump(p) for p in prompts])
        elif not prompts:
            rprint("[dim]No prompts found.[/dim]")
        else:
            console.print(_prompt_table("Prompts", prompts))


@prompt_app.command("show")
def show_prompt(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show a prompt in full."""
    with _session(db) as session:
        prompt = PromptService(session).get_prompt_by_id(prompt_id)
        if prompt is None:
            rprint(f"[red]Error:[/red] Prompt '{prompt_id}' not found.")
            raise typer.Exit(1)
        out = PromptOut.model_validate(prompt)
        if json_output:
            _echo_json(_dump(out))
            return
        rprint(f"[bold cyan]{out.title}[/bold cyan] [dim]({out.status})[/dim]")
        rprint(
            f"[dim]Category: {out.category} | Author: {out.author_name} | "
            f"Tags: {', '.join(out.tags) or 'none'} | "
            f"Uses: {out.usage_count} | Runs: {out.execution_count}[/dim]"
        )
        rprint()
        console.print(out.content, markup=False, highlight=False)


@prompt_app.command("submit")
def submit_prompt(
    title: Annotated[str, typer.Option("--title", "-t", help="Prompt title.")],
    category: Annotated[str, typer.Option("--category", help="Category id.")],
    content: Annotated[
        str | None,
        typer.Option("--content", "-c", help="Prompt content. Use - to read from stdin."),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Read prompt content from a file."),
    ] = None,
    tag: Annotated[
        list[str] | None,
        typer.Option("--tag", help="Tags (repeatable)."),
    ] = None,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Submit a prompt for review."""
    content = _read_content(content, file)
    if content is None:
        rprint("[red]Error:[/red] Provide prompt content via --content or --file.")
        raise typer.Exit(1) from None
    with _session(db) as session:
        data = PromptCreate(title=title, content=content, category=category, tags=tag or [])
        prompt = PromptService(session).create_prompt(_identity(as_user), data)
        rprint(
            f"[green]✓[/green] Submitted [bold]{prompt.title}[/bold] "
            f"(id: {prompt.id}) for review"
        )


@prompt_app.command("update")
def update_prompt(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    title: Annotated[str | None, typer.Option("--title", "-t")] = None,
    content: Annotated[
        str | None, typer.Option("--content", "-c", help="New content. Use - for stdin.")
    ] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f")] = None,
    category: Annotated[str | None, typer.Option("--category")] = None,
    tag: Annotated[
        list[str] | None, typer.Option("--tag", help="Replace tags (repeatable).")
    ] = None,
    featured: Annotated[
        bool | None, typer.Option("--featured/--not-featured", help="Feature the prompt.")
    ] = None,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Edit a prompt's fields."""
    content = _read_content(content, file)
    fields: dict[str, Any] = {
        "title": title,
        "content": content,
        "category": category,
        "tags": tag,
        "featured": featured,
    }
    with _session(db) as session:
        patch = PromptUpdate(**{k: v for k, v in fields.items() if v is not None})
        PromptService(session).update_prompt(_identity(as_user), prompt_id, patch)
        rprint(f"[green]✓[/green] Updated prompt [bold]{prompt_id}[/bold]")


@prompt_app.command("status")
def set_status(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    status: Annotated[str, typer.Argument(help="pending, approved or rejected")],
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Approve, reject or re-queue a prompt."""
    with _session(db) as session:
        PromptService(session).update_prompt_status(_identity(as_user), prompt_id, status)
        rprint(f"[green]✓[/green] Prompt [bold]{prompt_id}[/bold] is now {status}")


@prompt_app.command("pending")
def pending(db: DbOption = None, json_output: JsonOption = False) -> None:
    """List prompts waiting for review."""
    with _session(db) as session:
        queue = PromptService(session).get_pending_prompts()
        prompts = [PromptOut.model_validate(p) for p in queue]
        if json_output:
            _echo_json([_dump(p) for p in prompts])
        elif not prompts:
            rprint("[dim]Nothing to review.[/dim]")
        else:
            table = Table(title="Pending prompts")
            table.add_column("ID", style="dim")
            table.add_column("Title", style="cyan")
            table.add_column("Author")
            table.add_column("Submitted", style="dim")
            for p in prompts:
                table.add_row(p.id, p.title, p.author_name, _fmt_ms(p.created_at))
            console.print(table)


@prompt_app.command("by-author")
def by_author(
    author_id: Annotated[str, typer.Argument(help="Author's identity-provider subject")],
    db: DbOption = None,
) -> None:
    """List every prompt an author submitted, newest first, as JSON."""
    with _session(db) as session:
        prompts = PromptService(session).get_prompts_by_author(author_id)
        _echo_json([_dump(PromptOut.model_validate(p)) for p in prompts])


@prompt_app.command("use")
def use_prompt(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    delta: Annotated[int, typer.Option("--delta", help="Amount to add.")] = 1,
    json_output: JsonOption = False,
    db: DbOption = None,
) -> None:
    """Record that a prompt was copied."""
    with _session(db) as session:
        result = PromptService(session).increment_usage_count(prompt_id, delta)
    if json_output:
        _echo_json(result.model_dump(by_alias=True, exclude_none=True))
        return
    rprint(f"[green]✓[/green] Usage count for [bold]{prompt_id}[/bold] is now {result.value}")


@prompt_app.command("run")
def run_prompt(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    delta: Annotated[int, typer.Option("--delta", help="Amount to add.")] = 1,
    json_output: JsonOption = False,
    db: DbOption = None,
) -> None:
    """Record that a prompt was executed with an AI model."""
    with _session(db) as session:
        result = PromptService(session).increment_execution_count(prompt_id, delta)
    if json_output:
        _echo_json(result.model_dump(by_alias=True, exclude_none=True))
        return
    rprint(
        f"[green]✓[/green] Execution count for [bold]{prompt_id}[/bold] is now {result.value}"
    )


@prompt_app.command("delete")
def delete_prompt(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Delete a prompt."""
    if not yes:
        confirm = typer.confirm(f"Delete prompt '{prompt_id}'?")
        if not confirm:
            rprint("[dim]Aborted.[/dim]")
            raise typer.Exit(0)
    with _session(db) as session:
        PromptService(session).delete_prompt(_identity(as_user), prompt_id)
        rprint(f"[green]✓[/green] Deleted [bold]{prompt_id}[/bold]")


# ------------------------------------------------------------------
# category
# ------------------------------------------------------------------


@category_app.command("list")
def list_categories(db: DbOption = None, json_output: JsonOption = False) -> None:
    """List categories by name."""
    with _session(db) as session:
        categories = [
            CategoryOut.model_validate(c) for c in CategoryService(session).list_categories()
        ]
        if json_output:
            _echo_json([_dump(c) for c in categories])
        elif not categories:
            rprint("[dim]No categories found.[/dim]")
        else:
            table = Table(title="Categories")
            table.add_column("ID", style="cyan")
            table.add_column("Name")
            table.add_column("Prompts", justify="right")
            table.add_column("Description", style="dim")
            for c in categories:
                table.add_row(c.category_id, c.name, str(c.prompt_count), c.description)
            console.print(table)


# ------------------------------------------------------------------
# blog
# ------------------------------------------------------------------


@blog_app.command("list")
def list_blogs(
    include_drafts: Annotated[
        bool, typer.Option("--all", help="Include drafts (newest first).")
    ] = False,
    search: Annotated[str | None, typer.Option("--search", "-s")] = None,
    limit: Annotated[int | None, typer.Option("--limit", "-n")] = None,
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """List published blog posts."""
    with _session(db) as session:
        service = BlogService(session)
        if include_drafts:
            blogs = service.get_all_blogs()
        else:
            blogs = service.get_published_blogs(limit=limit, search=search)
        out = [BlogOut.model_validate(b) for b in blogs]
        if json_output:
            _echo_json([_dump(b) for b in out])
        elif not out:
            rprint("[dim]No posts found.[/dim]")
        else:
            table = Table(title="Blog posts")
            table.add_column("Slug", style="cyan")
            table.add_column("Title")
            table.add_column("Status")
            table.add_column("Published", style="dim")
            for b in out:
                table.add_row(b.slug, b.title, b.status, _fmt_ms(b.published_at))
            console.print(table)


@blog_app.command("show")
def show_blog(
    slug: Annotated[str, typer.Argument(help="Post slug")],
    db: DbOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show a published post."""
    with _session(db) as session:
        blog = BlogService(session).get_blog_by_slug(slug)
        if blog is None:
            rprint(f"[red]Error:[/red] No published post '{slug}'.")
            raise typer.Exit(1)
        out = BlogOut.model_validate(blog)
        if json_output:
            _echo_json(_dump(out))
            return
        rprint(f"[bold cyan]{out.title}[/bold cyan]")
        rprint(f"[dim]By {out.author_name} | {_fmt_ms(out.published_at)}[/dim]")
        rprint()
        console.print(out.content, markup=False, highlight=False)


@blog_app.command("create")
def create_blog(
    title: Annotated[str, typer.Option("--title", "-t")],
    content: Annotated[
        str | None, typer.Option("--content", "-c", help="Markdown body. Use - for stdin.")
    ] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f")] = None,
    slug: Annotated[str | None, typer.Option("--slug", help="Defaults to the title.")] = None,
    excerpt: Annotated[str, typer.Option("--excerpt")] = "",
    tag: Annotated[list[str] | None, typer.Option("--tag")] = None,
    publish: Annotated[bool, typer.Option("--publish", help="Publish immediately.")] = False,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Create a blog post (draft unless --publish)."""
    content = _read_content(content, file)
    if content is None:
        rprint("[red]Error:[/red] Provide the post body via --content or --file.")
        raise typer.Exit(1) from None
    with _session(db) as session:
        data = BlogCreate(
            title=title,
            slug=slug,
            content=content,
            excerpt=excerpt,
            tags=tag or [],
            status="published" if publish else "draft",
        )
        blog = BlogService(session).create_blog(_identity(as_user), data)
        rprint(f"[green]✓[/green] Created [bold]{blog.slug}[/bold] (id: {blog.id})")


@blog_app.command("update")
def update_blog(
    blog_id: Annotated[str, typer.Argument(help="Post id")],
    title: Annotated[str | None, typer.Option("--title", "-t")] = None,
    slug: Annotated[str | None, typer.Option("--slug")] = None,
    content: Annotated[str | None, typer.Option("--content", "-c")] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f")] = None,
    status: Annotated[str | None, typer.Option("--status", help="draft or published")] = None,
    featured: Annotated[bool | None, typer.Option("--featured/--not-featured")] = None,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Edit a blog post."""
    content = _read_content(content, file)
    fields: dict[str, Any] = {
        "title": title,
        "slug": slug,
        "content": content,
        "status": status,
        "featured": featured,
    }
    with _session(db) as session:
        patch = BlogUpdate(**{k: v for k, v in fields.items() if v is not None})
        blog = BlogService(session).update_blog(_identity(as_user), blog_id, patch)
        rprint(f"[green]✓[/green] Updated [bold]{blog.slug}[/bold] ({blog.status})")


@blog_app.command("delete")
def delete_blog(
    blog_id: Annotated[str, typer.Argument(help="Post id")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Delete a blog post."""
    if not yes:
        confirm = typer.confirm(f"Delete post '{blog_id}'?")
        if not confirm:
            rprint("[dim]Aborted.[/dim]")
            raise typer.Exit(0)
    with _session(db) as session:
        BlogService(session).delete_blog(_identity(as_user), blog_id)
        rprint(f"[green]✓[/green] Deleted [bold]{blog_id}[/bold]")


@blog_app.command("slug")
def slug_command(title: Annotated[str, typer.Argument(help="Title to convert")]) -> None:
    """Print the slug generated for a title."""
    typer.echo(generate_slug(title))


# ------------------------------------------------------------------
# favorite
# ------------------------------------------------------------------


@favorite_app.command("toggle")
def toggle_favorite(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Save a prompt, or remove it if it is already saved."""
    with _session(db) as session:
        saved = FavoriteService(session).toggle_favorite(_identity(as_user), prompt_id)
        verb = "Saved" if saved else "Removed"
        rprint(f"[green]✓[/green] {verb} [bold]{prompt_id}[/bold]")


@favorite_app.command("remove")
def remove_favorite(
    prompt_id: Annotated[str, typer.Argument(help="Prompt id")],
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Remove a prompt from your favorites."""
    with _session(db) as session:
        if FavoriteService(session).remove_favorite(_identity(as_user), prompt_id):
            rprint(f"[green]✓[/green] Removed [bold]{prompt_id}[/bold]")
        else:
            rprint(f"[dim]'{prompt_id}' was not a favorite.[/dim]")


@favorite_app.command("list")
def list_favorites(
    as_user: AsOption = None, db: DbOption = None, json_output: JsonOption = False
) -> None:
    """List your favorite prompts, most recently saved first."""
    with _session(db) as session:
        prompts = FavoriteService(session).list_favorite_prompts(_identity(as_user))
        if json_output:
            _echo_json([_dump(p) for p in prompts])
        elif not prompts:
            rprint("[dim]No favorite prompts.[/dim]")
        else:
            console.print(_prompt_table("Favorites", prompts))


# ------------------------------------------------------------------
# user
# ------------------------------------------------------------------


@user_app.command("me")
def me(as_user: AsOption = None, db: DbOption = None) -> None:
    """Show the current user record as JSON."""
    with _session(db) as session:
        user = UserService(session).get_current_user(_identity(as_user))
        _echo_json(_dump(UserOut.model_validate(user)) if user is not None else None)


@user_app.command("ensure")
def ensure(
    name: Annotated[str | None, typer.Option("--name")] = None,
    email: Annotated[str | None, typer.Option("--email")] = None,
    as_user: AsOption = None,
    db: DbOption = None,
) -> None:
    """Create your user record if the identity provider has not synced it yet."""
    with _session(db) as session:
        user = UserService(session).ensure_current_user(_identity(as_user), name, email)
        rprint(f"[green]✓[/green] User [bold]{user.external_id}[/bold] ({user.name})")


@user_app.command("role")
def role(
    external_id: Annotated[str, typer.Argument(help="Identity-provider subject")],
    new_role: Annotated[str, typer.Argument(help="user or admin")],
    db: DbOption = None,
) -> None:
    """Change a user's role."""
    with _session(db) as session:
        UserService(session).set_role(external_id, new_role)
        rprint(f"[green]✓[/green] [bold]{external_id}[/bold] is now {new_role}")


@user_app.command("webhook")
def webhook(
    file: Annotated[Path, typer.Argument(help="Verified event payload (JSON). Use - for stdin.")],
    db: DbOption = None,
) -> None:
    """Apply an identity-provider user event (created, updated or deleted)."""
    if str(file) != "-" and not file.exists():
        rprint(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1) from None
    raw = sys.stdin.read() if str(file) == "-" else file.read_text(encoding="utf-8")
    try:
        event = json.loads(raw)
    except json.JSONDecodeError as exc:
        rprint(f"[red]Error:[/red] Invalid JSON: {exc}")
        raise typer.Exit(1) from None
    with _session(db) as session:
        result = UserService(session).handle_webhook_event(event)
        rprint(f"[green]✓[/green] {result}")
