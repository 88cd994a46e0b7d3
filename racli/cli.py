"""
Command-line interface for the RegistryAccord CLI.
"""

from __future__ import annotations

import json
import logging
import mimetypes
from typing import Any, Callable

import click

from racli.client.client import RegistryAccordClient
from racli.client.discovery import SEARCH_TYPES
from racli.common.config import Config
from racli.common.decorators import exit_on_error
from racli.common.models import ClientConfig
from racli.common.validators import require_did, require_timestamp


_COMMON_OPTIONS = (
    click.option("--json", "as_json", is_flag=True, help="output JSON"),
    click.option("--verbose", is_flag=True, help="enable verbose logs"),
    click.option(
        "--timeout-ms",
        type=click.IntRange(min=1),
        default=None,
        help="HTTP timeout in milliseconds (overrides RA_HTTP_TIMEOUT_MS)",
    ),
)


def common_options(func: Callable) -> Callable:
    """--json, --verbose and --timeout-ms on every command."""
    for option in reversed(_COMMON_OPTIONS):
        func = option(func)
    return func


identity_base_option = click.option(
    "--identity-base",
    default=None,
    help="Identity service base URL (overrides RA_IDENTITY_BASE_URL)",
)
cdv_base_option = click.option(
    "--cdv-base", default=None, help="CDV service base URL (overrides RA_CDV_BASE_URL)"
)
gateway_base_option = click.option(
    "--gateway-base",
    default=None,
    help="Gateway service base URL (overrides RA_GATEWAY_BASE_URL)",
)
limit_option = click.option(
    "--limit",
    type=click.IntRange(1, 100),
    default=20,
    show_default=True,
    help="Number of items to return",
)
cursor_option = click.option("--cursor", default=None, help="Pagination cursor")


def build_client(
    *, verbose: bool, timeout_ms: int | None, **bases: str | None
) -> RegistryAccordClient:
    return RegistryAccordClient(
        ClientConfig(
            timeout_ms=timeout_ms,
            log_level=logging.DEBUG if verbose else None,
            **bases,
        )
    )


def emit(data: Any, as_json: bool, lines: list[str]) -> None:  # noqa: FBT001
    if as_json:
        click.echo(json.dumps(data))
        return
    for line in lines:
        click.echo(line)


def emit_page(page: Any, as_json: bool, title: str, fmt: Callable) -> None:  # noqa: FBT001
    lines = [title] + [f"  {fmt(item)}" for item in page.items]
    if page.next_cursor:
        lines.append(f"\nNext cursor: {page.next_cursor}")
    emit(page.to_wire(), as_json, lines)


@click.group()
@click.version_option(Config().CLI_VERSION, prog_name="ra")
def cli() -> None:
    """RegistryAccord CLI"""


# Identity


@cli.group()
def identity() -> None:
    """Manage the local identity"""


@identity.command("create")
@click.option("--force", is_flag=True, help="Overwrite an existing identity")
@common_options
@exit_on_error
def identity_create(
    force: bool,  # noqa: FBT001
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Generate an Ed25519 keypair and store it under ~/.registryaccord/key.json"""
    client = build_client(verbose=verbose, timeout_ms=timeout_ms)
    created, key_path = client.create_identity(force=force)
    emit(
        {"did": created.did, "keyPath": str(key_path)},
        as_json,
        [f"DID: {created.did}", f"Key stored at: {key_path}"],
    )


# Sessions


@cli.group()
def session() -> None:
    """Obtain session tokens from the identity service"""


@session.command("nonce")
@click.option("--did", required=True, help="DID identifier")
@click.option("--aud", required=True, help="Audience identifier")
@identity_base_option
@common_options
@exit_on_error
def session_nonce(
    did: str,
    aud: str,
    identity_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Fetch a short-lived nonce for the given DID and audience"""
    did = require_did(did)
    client = build_client(
        verbose=verbose, timeout_ms=timeout_ms, identity_base=identity_base
    )
    challenge = client.sessions.request_nonce(did, aud)
    emit(
        challenge.to_wire(),
        as_json,
        [f"Nonce: {challenge.nonce}", f"Expires: {challenge.expires_at}"],
    )


@session.command("issue")
@click.option("--did", required=True, help="DID identifier")
@click.option("--aud", required=True, help="Audience identifier")
@click.option("--nonce", required=True, help="Nonce value")
@identity_base_option
@common_options
@exit_on_error
def session_issue(
    did: str,
    aud: str,
    nonce: str,
    identity_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Sign the nonce with the local key and request a JWT"""
    did = require_did(did)
    client = build_client(
        verbose=verbose, timeout_ms=timeout_ms, identity_base=identity_base
    )
    issued = client.sessions.sign_and_issue(did, aud, nonce)
    emit(
        {"jwt": issued.jwt, "exp": issued.expiry, "aud": issued.aud, "sub": issued.did},
        as_json,
        [
            f"JWT: {issued.jwt}",
            f"Expires: {issued.expiry}",
            f"Audience: {issued.aud}",
            f"Subject: {issued.did}",
            "Session stored successfully",
        ],
    )


@cli.command()
@common_options
@exit_on_error
def whoami(
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Print current DID and token expiry if a session is active"""
    client = build_client(verbose=verbose, timeout_ms=timeout_ms)
    status = client.session_store.current_session()
    if status is None:
        emit({"active": False}, as_json, ["No active session"])
        return
    emit(
        status.model_dump(),
        as_json,
        [
            f"DID: {status.did}",
            f"Active: {'Yes' if status.active else 'No'}",
            f"Expires: {status.expiry}",
        ],
    )


# Posts


@cli.group()
def post() -> None:
    """Create and list signed posts"""


@post.command("create")
@click.argument("text")
@click.option(
    "--media",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="Attach a media file (uploaded and checksum-verified first)",
)
@click.option("--mime-type", default=None, help="Media MIME type (guessed if omitted)")
@click.option(
    "--remote",
    is_flag=True,
    help="Submit to the CDV service instead of the local stub",
)
@click.option("--aud", default=None, help="Session audience for --remote")
@cdv_base_option
@common_options
@exit_on_error
def post_create(  # noqa: PLR0913
    text: str,
    media: str | None,
    mime_type: str | None,
    remote: bool,  # noqa: FBT001
    aud: str | None,
    cdv_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Create and sign a new post with your identity"""
    client = build_client(verbose=verbose, timeout_ms=timeout_ms, cdv_base=cdv_base)
    if media and not mime_type:
        mime_type = mimetypes.guess_type(media)[0]

    if remote:
        out = client.content.create_remote_post(
            text, aud or client.settings.audience, media, mime_type
        )
        emit(out.to_wire(), as_json, [f"Post created: {out.uri}", f"CID: {out.cid}"])
        return

    record = client.content.create_local_post(text, media, mime_type)
    emit(
        {"id": record.id, "created": True},
        as_json,
        [click.style("Post created and signed", fg="green")],
    )


@post.command("list")
@click.option("--did", default=None, help="Author DID (required unless --local)")
@click.option("--collection", default=None, help="collection NSID")
@limit_option
@cursor_option
@click.option("--since", default=None, help="ISO timestamp to filter records since")
@click.option("--until", default=None, help="ISO timestamp to filter records until")
@click.option(
    "--local", is_flag=True, help="Read and verify the local stub instead of the CDV"
)
@cdv_base_option
@common_options
@exit_on_error
def post_list(  # noqa: PLR0913
    did: str | None,
    collection: str | None,
    limit: int,
    cursor: str | None,
    since: str | None,
    until: str | None,
    local: bool,  # noqa: FBT001
    cdv_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Page through CDV GET /v1/repo/listRecords with deterministic cursors"""
    if local:
        client = build_client(verbose=verbose, timeout_ms=timeout_ms)
        posts = client.content.list_local_posts()
        emit(
            [{**p.record.to_wire(), "valid": p.valid} for p in posts],
            as_json,
            [
                f"[{p.record.created_at}] {p.record.text} "
                f"({'valid' if p.valid else 'INVALID'})"
                for p in posts
            ],
        )
        return

    did = require_did(did)
    require_timestamp(since, "since")
    require_timestamp(until, "until")
    client = build_client(verbose=verbose, timeout_ms=timeout_ms, cdv_base=cdv_base)
    page = client.content.list_remote_posts(did, collection, limit, cursor, since, until)
    emit_page(
        page,
        as_json,
        f"Posts for {did}:",
        lambda it: f"[{it.get('createdAt')}] {it.get('text')}",
    )


# Discovery


@cli.group()
def feed() -> None:
    """Read feeds from the gateway"""


@feed.command("following")
@click.option("--viewer-did", required=True, help="DID identifier")
@limit_option
@cursor_option
@gateway_base_option
@common_options
@exit_on_error
def feed_following(  # noqa: PLR0913
    viewer_did: str,
    limit: int,
    cursor: str | None,
    gateway_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Get feed of posts from followed users"""
    viewer_did = require_did(viewer_did)
    client = build_client(
        verbose=verbose, timeout_ms=timeout_ms, gateway_base=gateway_base
    )
    page = client.discovery.feed_following(viewer_did, limit, cursor)
    emit_page(
        page,
        as_json,
        f"Feed for {viewer_did}:",
        lambda it: f"[{it.get('createdAt')}] {it.get('did')}: {it.get('text')}",
    )


@feed.command("author")
@click.option("--author-did", required=True, help="DID identifier")
@limit_option
@cursor_option
@gateway_base_option
@common_options
@exit_on_error
def feed_author(  # noqa: PLR0913
    author_did: str,
    limit: int,
    cursor: str | None,
    gateway_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Get feed of posts by specific author"""
    author_did = require_did(author_did)
    client = build_client(
        verbose=verbose, timeout_ms=timeout_ms, gateway_base=gateway_base
    )
    page = client.discovery.feed_author(author_did, limit, cursor)
    emit_page(
        page,
        as_json,
        f"Feed for {author_did}:",
        lambda it: f"[{it.get('createdAt')}] {it.get('did')}: {it.get('text')}",
    )


def _format_search_hit(item: dict[str, Any]) -> str:
    if item.get("type") == "profile":
        return f"[Profile] {item.get('did')} (Score: {item.get('score')})"
    text = str(item.get("text", ""))
    if len(text) > 50:  # noqa: PLR2004
        text = text[:50] + "..."
    return f"[Post] {text} (Score: {item.get('score')})"


@cli.command()
@click.option("--q", "query", required=True, help="Search query")
@click.option(
    "--type",
    "search_type",
    type=click.Choice(SEARCH_TYPES),
    default="all",
    show_default=True,
    help="Type of content to search for",
)
@limit_option
@cursor_option
@gateway_base_option
@common_options
@exit_on_error
def search(  # noqa: PLR0913
    query: str,
    search_type: str,
    limit: int,
    cursor: str | None,
    gateway_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Search for posts, profiles, or content"""
    if not query.strip():
        raise click.UsageError("Search query is required and cannot be empty")
    client = build_client(
        verbose=verbose, timeout_ms=timeout_ms, gateway_base=gateway_base
    )
    page = client.discovery.search(query, search_type, limit, cursor)
    emit_page(page, as_json, f'Search results for "{query}":', _format_search_hit)


@cli.group()
def profile() -> None:
    """Read profiles from the gateway"""


@profile.command("get")
@click.option("--did", required=True, help="DID identifier")
@gateway_base_option
@common_options
@exit_on_error
def profile_get(
    did: str,
    gateway_base: str | None,
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Get profile information for a DID"""
    did = require_did(did)
    client = build_client(
        verbose=verbose, timeout_ms=timeout_ms, gateway_base=gateway_base
    )
    doc = client.discovery.profile(did)
    emit(
        doc,
        as_json,
        [
            f"Profile for {doc.get('did', did)}:",
            f"  Display Name: {doc.get('displayName', '')}",
            f"  Description: {doc.get('description', '')}",
            f"  Created: {doc.get('createdAt', '')}",
        ],
    )


# Configuration


@cli.command("config")
@common_options
@exit_on_error
def show_config(
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Print effective configuration (no secrets)"""
    client = build_client(verbose=verbose, timeout_ms=timeout_ms)
    info = client.settings.describe()
    emit(
        info,
        as_json,
        ["Current Configuration:"] + [f"  {k}: {v}" for k, v in info.items()],
    )


@cli.command()
@common_options
@exit_on_error
def version(
    as_json: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    timeout_ms: int | None,
) -> None:
    """Print CLI, API targets, and schema versions in use"""
    client = build_client(verbose=verbose, timeout_ms=timeout_ms)
    settings = client.settings
    info = {
        "cli": settings.config.CLI_VERSION,
        "api": settings.config.API_VERSION,
        "identity": settings.identity_base,
        "cdv": settings.cdv_base,
        "gateway": settings.gateway_base,
        "env": settings.env,
    }
    emit(
        info,
        as_json,
        [
            f"RegistryAccord CLI Version: {info['cli']}",
            f"API Version: {info['api']}",
            f"Identity Service: {info['identity']}",
            f"CDV Service: {info['cdv']}",
            f"Gateway Service: {info['gateway']}",
            f"Environment: {info['env']}",
        ],
    )


if __name__ == "__main__":
    cli()
