"""
cloudacct CLI entry point.
"""
import os
import sys
from typing import List, Optional, Tuple

import click
import yaml
from rich.console import Console
from rich.table import Table

from cloudacct import __version__
from cloudacct.config import Settings, load_settings
from cloudacct.detect import detect_format
from cloudacct.errors import CloudAccountError, ConfigurationError, ValidationError
from cloudacct.mapper.credentials import credentials_equivalent
from cloudacct.mapper.diff import plan as plan_changes
from cloudacct.mapper.identity import compose_id, parse_id
from cloudacct.mapper.variant import decode
from cloudacct.models.account import CLOUD_TYPES, SENSITIVE_PLACEHOLDER
from cloudacct.models.resource import AccountResource, DecodeResult, ProviderConfig
from cloudacct.parsers import terraform
from cloudacct.reporters import hcl_reporter, json_reporter

console = Console(stderr=True)

_CLOUD_COLORS = {
    "aws": "yellow",
    "azure": "blue",
    "gcp": "green",
    "alibaba": "magenta",
}


def _collect_files(paths: Tuple[str, ...]) -> List[str]:
    """Expand directories into file paths."""
    files = []
    for p in paths:
        if os.path.isfile(p):
            files.append(p)
        elif os.path.isdir(p):
            for root, _, fnames in os.walk(p):
                for fname in sorted(fnames):
                    files.append(os.path.join(root, fname))
        else:
            console.print(f"[yellow]Warning:[/yellow] '{p}' does not exist, skipping.")
    return files


def _parse_files(file_paths: List[str]) -> List[AccountResource]:
    resources: List[AccountResource] = []
    for fp in file_paths:
        if detect_format(fp) == "unknown":
            console.print(f"[dim]Skipping unsupported file:[/dim] {fp}")
            continue
        resources.extend(terraform.parse_file(fp))
    return resources


def _decode_all(resources: List[AccountResource], settings: Settings) -> List[DecodeResult]:
    results = []
    for r in resources:
        try:
            cloud_type, _, account = decode(r.config, settings)
            provider = ProviderConfig.from_tree(r.config)
        except ValidationError as exc:
            results.append(DecodeResult(resource=r, error=exc.message))
            continue
        results.append(DecodeResult(
            resource=r, cloud_type=cloud_type, account=account, provider=provider,
        ))
    return results


def _print_summary_table(results: List[DecodeResult], no_color: bool) -> None:
    """Print a rich summary table to stderr."""
    tbl = Table(title="Cloud Accounts", show_header=True, header_style="bold")
    tbl.add_column("Resource", width=36)
    tbl.add_column("Cloud", width=8)
    tbl.add_column("Name", width=24)
    tbl.add_column("Account ID", width=20)
    tbl.add_column("Enabled", width=7)
    tbl.add_column("Groups")
    tbl.add_column("Status")

    for res in results:
        if not res.ok:
            status = res.error if no_color else f"[red]{res.error}[/red]"
            tbl.add_row(res.resource.qualified_name, "-", "-", "-", "-", "-", status)
            continue
        cloud = res.cloud_type.value
        color = _CLOUD_COLORS.get(cloud, "") if not no_color else ""
        acct = res.account
        tbl.add_row(
            res.resource.qualified_name,
            f"[{color}]{cloud}[/{color}]" if color else cloud,
            acct.name,
            acct.account_id,
            "yes" if acct.enabled else "no",
            ", ".join(acct.group_ids),
            "ok" if no_color else "[green]ok[/green]",
        )

    Console(stderr=True, no_color=no_color).print(tbl)


def _settings(ctx) -> Settings:
    return (ctx.obj or {}).get("settings") or Settings()


def _fail(message: str, code: int = 2) -> None:
    console.print(f"[red]Error:[/red] {message}")
    sys.exit(code)


def _load_mapping(path: str) -> dict:
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ValidationError(f"failed to parse {path}: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"{path}: expected a mapping")
    return data


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__)
@click.option(
    "--config", "config_path",
    type=click.Path(),
    default=None,
    help="Settings file (default: $CLOUDACCT_CONFIG or ./cloudacct.yaml).",
)
@click.pass_context
def cli(ctx, config_path):
    """cloudacct — cloud account mapper for Prisma Cloud style account APIs."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(config_path)
    except ConfigurationError as exc:
        _fail(exc.message)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path())
@click.option(
    "--format", "output_format",
    type=click.Choice(["table", "json", "hcl"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Write the report to this file (default: stdout).",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable rich terminal color output.",
)
@click.option(
    "--show-sensitive",
    is_flag=True,
    default=False,
    help="Print secrets in clear text in HCL output.",
)
@click.pass_context
def inspect(
    ctx,
    paths: Tuple[str, ...],
    output_format: str,
    output: Optional[str],
    no_color: bool,
    show_sensitive: bool,
) -> None:
    """
    Decode every cloud account resource in Terraform files or directories.

    Exits with code 1 when any resource fails to decode.
    """
    stderr = Console(stderr=True, no_color=no_color)
    settings = _settings(ctx)

    file_paths = _collect_files(paths)
    if not file_paths:
        stderr.print("[red]No files found.[/red]")
        sys.exit(2)

    resources = _parse_files(file_paths)
    if not resources:
        stderr.print("[yellow]No cloud account resources found in the provided paths.[/yellow]")
        sys.exit(0)

    results = _decode_all(resources, settings)
    invalid = [r for r in results if not r.ok]
    stderr.print(
        f"Found [bold]{len(results)}[/bold] cloud account resource(s), "
        f"[bold]{len(invalid)}[/bold] invalid."
    )

    fmt = output_format.lower()
    if fmt == "table":
        _print_summary_table(results, no_color)
    else:
        if fmt == "json":
            report_content = json_reporter.build_report(results, ", ".join(paths))
        else:
            report_content = hcl_reporter.render([
                (
                    r.resource.name,
                    r.cloud_type,
                    r.account,
                    r.provider,
                    None,
                )
                for r in results
                if r.ok
            ], show_sensitive=show_sensitive)

        if output:
            with open(output, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(report_content)
            stderr.print(f"Report written to [bold]{output}[/bold]")
        else:
            click.echo(report_content)

    sys.exit(1 if invalid else 0)


@cli.group("id")
def id_group():
    """Compose and parse composite cloud account ids."""


@id_group.command("compose")
@click.argument("cloud_type", type=click.Choice([ct.value for ct in CLOUD_TYPES]))
@click.argument("platform_id")
def id_compose(cloud_type: str, platform_id: str) -> None:
    """Build the id Terraform stores for CLOUD_TYPE and PLATFORM_ID."""
    try:
        resource_id = compose_id(cloud_type, platform_id)
    except ValidationError as exc:
        _fail(exc.message)
    click.echo(resource_id)


@id_group.command("parse")
@click.argument("resource_id")
def id_parse(resource_id: str) -> None:
    """Split a composite id into its cloud type and platform id."""
    try:
        identity = parse_id(resource_id)
    except ValidationError as exc:
        _fail(exc.message)
    click.echo(f"cloud_type:  {identity.cloud_type.value}")
    click.echo(f"platform_id: {identity.platform_id}")


@cli.command("credentials-equal")
@click.argument("old", type=click.File("r", encoding="utf-8"))
@click.argument("new", type=click.File("r", encoding="utf-8"))
def credentials_equal(old, new) -> None:
    """
    Compare two GCP credentials JSON files field by field.

    Exits 0 when they hold the same key, 1 otherwise.
    """
    if credentials_equivalent(old.read(), new.read()):
        click.echo("equivalent")
        sys.exit(0)
    click.echo("different")
    sys.exit(1)


@cli.command()
@click.argument("resource_id")
@click.argument("record", type=click.Path(exists=True, dir_okay=False))
@click.option("--resource-name", default=None, help="Terraform resource name (default: derived from the account name).")
@click.option("--disable-on-destroy", is_flag=True, default=False, help="Set disable_on_destroy in the rendered resource.")
@click.option("--update-on-create", is_flag=True, default=False, help="Set update_on_create in the rendered resource.")
@click.option("--show-sensitive", is_flag=True, default=False, help="Print secrets in clear text.")
@click.option("--output", "-o", type=click.Path(), default=None, help="Write HCL to this file (default: stdout).")
@click.pass_context
def render(
    ctx,
    resource_id: str,
    record: str,
    resource_name: Optional[str],
    disable_on_destroy: bool,
    update_on_create: bool,
    show_sensitive: bool,
    output: Optional[str],
) -> None:
    """
    Render HCL plus an import block for an existing platform account.

    RECORD is a JSON or YAML mapping of the account's block fields.
    """
    try:
        identity = parse_id(resource_id)
        data = _load_mapping(record)
        cloud_type, name, account = decode({identity.cloud_type.value: [data]}, _settings(ctx))
    except CloudAccountError as exc:
        _fail(exc.message)

    content = hcl_reporter.render_account(
        resource_name or hcl_reporter.resource_name(name),
        cloud_type,
        account,
        import_id=str(identity),
        provider=ProviderConfig(
            disable_on_destroy=disable_on_destroy,
            update_on_create=update_on_create,
        ),
        show_sensitive=show_sensitive,
    )
    if output:
        with open(output, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(content)
        console.print(f"HCL written to [bold]{output}[/bold]")
    else:
        click.echo(content, nl=False)


@cli.command("plan")
@click.argument("state", type=click.Path(exists=True, dir_okay=False))
@click.argument("config", type=click.Path(exists=True, dir_okay=False))
@click.option("--show-sensitive", is_flag=True, default=False, help="Print secrets in clear text.")
def plan_cmd(state: str, config: str, show_sensitive: bool) -> None:
    """
    Show the field changes between a STATE tree and a CONFIG tree.

    Both are JSON or YAML mappings shaped like the resource body, e.g.
    ``{"aws": [{...}], "disable_on_destroy": true}``. Exits 1 when a change
    can only be applied by recreating the account.
    """
    try:
        result = plan_changes(_load_mapping(state), _load_mapping(config))
    except CloudAccountError as exc:
        _fail(exc.message)

    if result.empty:
        click.echo("No changes.")
        sys.exit(0)

    for change in result.changes:
        old, new = change.old, change.new
        if change.sensitive and not show_sensitive:
            old = SENSITIVE_PLACEHOLDER if old else old
            new = SENSITIVE_PLACEHOLDER if new else new
        marker = "-/+" if change.force_new else "~"
        suffix = " (forces replacement)" if change.force_new else ""
        click.echo(f"{marker} {change.path}: {hcl_reporter.hcl_value(old)} -> {hcl_reporter.hcl_value(new)}{suffix}")
    sys.exit(1 if result.replace else 0)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
