from __future__ import annotations

from pathlib import Path

import typer

from rel.cli.commands._helpers import unwrap_or_exit
from rel.cli.context import CLIContext, build_context
from rel.policy.args import (
    CommitArgs,
    PolicyArgs,
    PublishArgs,
    PushArgs,
    TagArgs,
    UnstableValue,
    parse_unstable,
)
from rel.policy.model import CertsSource, DependentVersion
from rel.policy.resolve import WorkspaceLayout, load_package_policy, load_workspace_policy
from rel.policy.schema import dump_policy


def _pair(value: bool | None) -> tuple[bool, bool]:
    """`--x/--no-x` arrives as one optional bool; split it back into the flag pair."""
    return (value is True, value is False)


def _unstable(ctx: CLIContext, values: list[str]) -> tuple[UnstableValue, ...]:
    parsed: list[UnstableValue] = []
    for value in values:
        parsed.append(unwrap_or_exit(parse_unstable(value), ctx))
    return tuple(parsed)


def config(
    workspace_root: Path = typer.Option(
        Path("."), "--workspace-root", help="Workspace (or package) root directory."
    ),
    package: Path | None = typer.Option(
        None, "--package", "-p", help="Show the policy of the package with this Cargo.toml."
    ),
    custom_config: Path | None = typer.Option(
        None, "--config", "-c", metavar="PATH", help="Custom config file."
    ),
    isolated: bool = typer.Option(False, "--isolated", help="Ignore implicit configuration files."),
    unstable: list[str] = typer.Option([], "-Z", metavar="FEATURE", help="Unstable options."),
    sign: bool | None = typer.Option(None, "--sign/--no-sign", help="Sign both git commit and tag."),
    dependent_version: DependentVersion | None = typer.Option(
        None, "--dependent-version", help="How workspace dependents of a package are updated."
    ),
    allow_branch: str | None = typer.Option(
        None, "--allow-branch", metavar="GLOB[,...]", help="Branches a release can happen from."
    ),
    certs_source: CertsSource | None = typer.Option(
        None, "--certs-source", help="Certificate store for web requests."
    ),
    sign_commit: bool | None = typer.Option(None, "--sign-commit/--no-sign-commit"),
    publish: bool | None = typer.Option(None, "--publish/--no-publish"),
    registry: str | None = typer.Option(None, "--registry", metavar="NAME"),
    verify: bool | None = typer.Option(None, "--verify/--no-verify"),
    features: list[str] = typer.Option([], "--features"),
    all_features: bool = typer.Option(False, "--all-features"),
    target: str | None = typer.Option(None, "--target", metavar="TRIPLE"),
    tag: bool | None = typer.Option(None, "--tag/--no-tag"),
    sign_tag: bool | None = typer.Option(None, "--sign-tag/--no-sign-tag"),
    tag_prefix: str | None = typer.Option(None, "--tag-prefix", metavar="PREFIX"),
    tag_name: str | None = typer.Option(None, "--tag-name", metavar="NAME"),
    push: bool | None = typer.Option(None, "--push/--no-push"),
    push_remote: str | None = typer.Option(None, "--push-remote", metavar="NAME"),
) -> None:
    """Show the effective release policy as TOML."""
    ctx = build_context()

    sign_yes, sign_no = _pair(sign)
    args = PolicyArgs(
        custom_config=custom_config,
        isolated=isolated,
        unstable=_unstable(ctx, unstable),
        sign=sign_yes,
        no_sign=sign_no,
        dependent_version=dependent_version,
        allow_branch=tuple(allow_branch.split(",")) if allow_branch else None,
        certs_source=certs_source,
        commit=CommitArgs(*_pair(sign_commit)),
        publish=PublishArgs(
            *_pair(publish),
            registry=registry,
            verify=verify is True,
            no_verify=verify is False,
            features=tuple(features),
            all_features=all_features,
            target=target,
        ),
        tag=TagArgs(*_pair(tag), *_pair(sign_tag), tag_prefix=tag_prefix, tag_name=tag_name),
        push=PushArgs(*_pair(push), push_remote=push_remote),
    )

    root = workspace_root.expanduser().resolve()
    layout = unwrap_or_exit(WorkspaceLayout.discover(root), ctx)

    if package is None:
        result = load_workspace_policy(args, layout, ctx.paths)
    else:
        result = load_package_policy(args, layout, package.resolve(), ctx.paths)
    policy = unwrap_or_exit(result, ctx)

    ctx.console.raw(dump_policy(policy.with_defaults()))
