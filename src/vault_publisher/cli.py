"""Command-line entry point: ``vault-publisher``."""

import argparse
import asyncio
import json
import logging
import sys

import requests

from . import __version__
from .config_loader import ensure_config
from .errors import PublisherError
from .lifespan import publisher_session
from .publishing import (
    BuildWaiter,
    DeletionReconciler,
    SelectionEngine,
    UpsertPublisher,
    outcome_to_json,
)

logger = logging.getLogger(__name__)


def _emit_json(payload) -> None:
    print(json.dumps(payload, indent=2))


async def _publish(ctx: dict, args: argparse.Namespace) -> int:
    vault = ctx["vault"]
    selection = SelectionEngine(ctx["settings"], ctx["default_repo"], store=vault)
    publisher = UpsertPublisher(
        ctx["client"], ctx["settings"], selection, vault, silent=args.silent
    )
    try:
        document = vault.load_document(args.note)
    except OSError as e:
        print(f"ERROR: Cannot read {args.note}: {e}", file=sys.stderr)
        return 1
    decision = selection.decide(document)
    if not decision.is_shared:
        print(
            f"{args.note} is not shared "
            f"(set '{ctx['settings'].share_key}: true' in its frontmatter)",
            file=sys.stderr,
        )
        return 1

    ok = await publisher.publish_document(
        document, one_file=True, documents=vault.list_documents()
    )
    if args.json:
        _emit_json(
            {"operation": "publish", "note": args.note, "published": ok}
        )
    elif not args.silent:
        if ok:
            print(f"Published {args.note} to {decision.target_repo}")
        else:
            print(f"Failed to publish {args.note}; see the log")
    return 0 if ok else 1


async def _wait_for_build(ctx: dict, args: argparse.Namespace) -> int:
    waiter = BuildWaiter(ctx["client"], ctx["settings"], ctx["default_repo"])
    result = await waiter.trigger_and_wait()
    if result is None:
        logger.info("No workflow configured; nothing to trigger")
    elif not args.silent and not args.json:
        print(f"Workflow {waiter.run_name} completed")
    return 0


async def _publish_all(ctx: dict, args: argparse.Namespace) -> int:
    vault = ctx["vault"]
    selection = SelectionEngine(ctx["settings"], ctx["default_repo"], store=vault)
    publisher = UpsertPublisher(
        ctx["client"], ctx["settings"], selection, vault, silent=args.silent
    )
    counters = await publisher.publish_batch(vault.list_documents())
    if args.json:
        _emit_json(outcome_to_json("publish-all", counters))
    if not args.no_workflow and counters.succeeded:
        await _wait_for_build(ctx, args)
    return 0 if counters.failed == 0 else 1


async def _prune(ctx: dict, args: argparse.Namespace) -> int:
    vault = ctx["vault"]
    selection = SelectionEngine(ctx["settings"], ctx["default_repo"], store=vault)
    reconciler = DeletionReconciler(
        ctx["client"], ctx["settings"], selection, silent=args.silent
    )
    documents = vault.list_documents()
    repos = [ctx["default_repo"]] + [
        d.target_repo for d in selection.select_shared_documents(documents)
    ]
    results = await reconciler.reconcile_all(repos, None, documents)
    if args.json:
        _emit_json(
            [outcome_to_json("prune", c, repo) for repo, c in results.items()]
        )
    if any(c is None for c in results.values()):
        return 1
    return 0 if all(c.failed == 0 for c in results.values()) else 1


COMMANDS = {
    "publish": _publish,
    "publish-all": _publish_all,
    "prune": _prune,
    "workflow": _wait_for_build,
}


async def main(args: argparse.Namespace, config_overrides: dict) -> int:
    """Open a publisher session and run the selected command in it."""
    async with publisher_session(config_overrides=config_overrides) as ctx:
        return await COMMANDS[args.command](ctx, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-publisher",
        description="Publish shared vault notes to GitHub and prune what is no longer shared",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write a starter config file
  vault-publisher init

  # Publish one note (path relative to the vault)
  vault-publisher --vault ~/notes publish garden/roses.md

  # Publish every shared note, then wait for the site build
  vault-publisher --vault ~/notes publish-all

  # Remove files that are no longer shared from every target repository
  vault-publisher --vault ~/notes prune

Note: All log output goes to stderr; --json writes results to stdout.
        """,
    )
    parser.add_argument(
        "--vault",
        help="Vault directory (default: VAULT_PUBLISHER_VAULT or the current directory)",
    )
    parser.add_argument(
        "--owner",
        help="Override repository owner (takes precedence over GITHUB_OWNER and config files)",
    )
    parser.add_argument(
        "--repo",
        help="Override repository name (takes precedence over GITHUB_REPO and config files)",
    )
    parser.add_argument(
        "--branch",
        help="Override working branch (takes precedence over GITHUB_BRANCH and config files)",
    )
    parser.add_argument(
        "--token",
        help="Override access token"
        " (visible in process list -- prefer GITHUB_TOKEN env var for security)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument("--log-file", help="Also append log records to this file")
    parser.add_argument(
        "--silent", action="store_true", help="Suppress batch summaries"
    )
    parser.add_argument(
        "--json", action="store_true", help="Write results to stdout as JSON"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"vault-publisher version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Write a starter config file if none exists")
    publish = sub.add_parser("publish", help="Publish one note")
    publish.add_argument("note", help="Note path relative to the vault")
    publish_all = sub.add_parser(
        "publish-all", help="Publish every shared note"
    )
    publish_all.add_argument(
        "--no-workflow",
        action="store_true",
        help="Do not trigger the build workflow afterwards",
    )
    sub.add_parser("prune", help="Delete remote files that are no longer shared")
    sub.add_parser("workflow", help="Trigger the build workflow and wait for it")
    return parser


def run(argv: list[str] | None = None) -> None:
    """Entry point that handles errors gracefully and parses CLI arguments."""
    args = build_parser().parse_args(argv)

    if args.command == "init":
        path = ensure_config()
        print(f"Config file: {path}")
        return

    config_overrides = {
        key: value
        for key, value in {
            "owner": args.owner,
            "repo": args.repo,
            "branch": args.branch,
            "token": args.token,
            "vault": args.vault,
            "log_file": args.log_file,
        }.items()
        if value
    }
    if args.debug:
        config_overrides["debug"] = True
    if args.log_format != "text":
        config_overrides["log_format"] = args.log_format

    try:
        code = asyncio.run(main(args, config_overrides))
    except (PublisherError, requests.RequestException) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except RuntimeError:
        # Error already printed to stderr by the session manager
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    run()
