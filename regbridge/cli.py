"""regbridge CLI — register and look up namespaces, services and endpoints."""

from __future__ import annotations

import functools
import os

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from regbridge import __version__

console = Console()


class _State:
    """Global options, and the registry built from them on first use."""

    def __init__(self, config_path: str | None, registry_dir: str | None, backend: str | None, verbose: bool):
        self.config_path = config_path
        self.registry_dir = registry_dir
        self.backend = backend
        self.verbose = verbose
        self._registry = None

    @property
    def registry(self):
        if self._registry is None:
            from regbridge.config import BackendType, build_registry, load_config
            from regbridge.utils.logging import configure_logging

            config = load_config(self.config_path)
            if self.backend:
                config.backend = BackendType(self.backend)
            elif self.config_path is None and "REGBRIDGE_BACKEND" not in os.environ:
                # Keep state between invocations unless told otherwise.
                config.backend = BackendType.FILE
            if self.registry_dir:
                config.registry_dir = self.registry_dir

            configure_logging("DEBUG" if self.verbose else config.log_level)
            self._registry = build_registry(config)
        return self._registry


def _handle_errors(func):
    """Print registry and config errors in red and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from regbridge.config import ConfigError
        from regbridge.errors import RegistryError

        try:
            return func(*args, **kwargs)
        except (RegistryError, ConfigError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise SystemExit(1) from e

    return wrapper


def _parse_kv(pairs: tuple[str, ...]) -> dict[str, str]:
    metadata = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise click.BadParameter(f"{pair!r} is not in key=value form", param_hint="--kv")
        metadata[key] = value
    return metadata


def _register_opts(kv, replace_metadata: bool, create_only: bool, update_only: bool) -> list:
    from regbridge.options import register as reg

    if create_only and update_only:
        raise click.UsageError("--create-only and --update-only cannot be used together")

    opts = []
    if kv:
        opts.append(reg.with_metadata(_parse_kv(kv)))
    if replace_metadata:
        opts.append(reg.with_replace_metadata())
    if create_only:
        opts.append(reg.with_create_mode())
    elif update_only:
        opts.append(reg.with_update_mode())
    return opts


def _list_opts(name_in, prefix, kv, results) -> list:
    from regbridge.options import listing

    opts = []
    if name_in:
        opts.append(listing.with_name_in(*name_in))
    if prefix:
        opts.append(listing.with_name_prefix(prefix))
    if kv:
        opts.append(listing.with_metadata(_parse_kv(kv)))
    if results is not None:
        opts.append(listing.with_results_number(results))
    return opts


def _get_opts(force_refresh: bool) -> list:
    from regbridge.options.get import with_force_refresh

    return [with_force_refresh()] if force_refresh else []


def _deregister_opts(fail_if_not_exists: bool) -> list:
    from regbridge.options.deregister import with_fail_if_not_exists

    return [with_fail_if_not_exists()] if fail_if_not_exists else []


def _format_metadata(metadata: dict[str, str]) -> str:
    return ", ".join(f"{k}={v}" for k, v in sorted(metadata.items()))


def _show(records: list, output: str, title: str) -> None:
    if output == "yaml":
        import yaml

        click.echo(yaml.safe_dump([r.to_dict() for r in records], sort_keys=False), nl=False)
        return

    if not records:
        console.print(f"[yellow]No {title.lower()} found.[/]")
        return

    table = Table(title=f"{title} ({len(records)})")
    table.add_column("Name", style="cyan")
    is_endpoint = hasattr(records[0], "address")
    if is_endpoint:
        table.add_column("Address")
        table.add_column("Port", justify="right")
    table.add_column("Metadata", style="dim")

    for r in records:
        row = [r.name]
        if is_endpoint:
            row += [r.address or "-", str(r.port) if r.port else "-"]
        row.append(_format_metadata(r.metadata))
        table.add_row(*row)

    console.print(table)


# Options shared by the commands of every group.
_output_option = click.option(
    "--output", "-o", default="table", type=click.Choice(["table", "yaml"]), help="Output format"
)
_force_refresh_option = click.option("--force-refresh", is_flag=True, help="Bypass the cache")
_fail_option = click.option(
    "--fail-if-not-exists", is_flag=True, help="Fail if there is nothing to deregister"
)
_kv_option = click.option("--kv", multiple=True, help="Metadata as key=value (repeatable)")
_replace_option = click.option(
    "--replace-metadata", is_flag=True, help="Drop stored metadata not given with --kv"
)
_create_only_option = click.option("--create-only", is_flag=True, help="Fail if the object already exists")
_update_only_option = click.option("--update-only", is_flag=True, help="Fail if the object does not exist")
_name_in_option = click.option("--name-in", multiple=True, help="Only list these names (repeatable)")
_prefix_option = click.option("--prefix", default=None, help="Only list names starting with this")
_results_option = click.option("--results", type=int, default=None, help="Page size")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, type=click.Path(exists=True), help="YAML config file")
@click.option("--registry-dir", default=None, help="Directory of the file backend")
@click.option("--backend", default=None, type=click.Choice(["memory", "file"]), help="Backend to use")
@click.option("--verbose", "-v", is_flag=True, help="Log what the registry does")
@click.pass_context
def main(ctx, config_path: str | None, registry_dir: str | None, backend: str | None, verbose: bool):
    """regbridge — one API for any service registry.

    Register, look up and list namespaces, the services inside them and
    the endpoints where services can be reached.
    """
    ctx.obj = _State(config_path, registry_dir, backend, verbose)


# ── Namespaces ───────────────────────────────────────────────────────


@main.group()
def namespace():
    """Manage namespaces."""


@namespace.command("get")
@click.argument("name")
@_force_refresh_option
@_output_option
@click.pass_obj
@_handle_errors
def namespace_get(state: _State, name: str, force_refresh: bool, output: str):
    """Show a namespace."""
    ns = state.registry.namespace(name).get(*_get_opts(force_refresh))
    _show([ns], output, "Namespaces")


@namespace.command("register")
@click.argument("name")
@_kv_option
@_replace_option
@_create_only_option
@_update_only_option
@click.pass_obj
@_handle_errors
def namespace_register(state: _State, name: str, kv, replace_metadata: bool, create_only: bool, update_only: bool):
    """Create or update a namespace."""
    state.registry.namespace(name).register(*_register_opts(kv, replace_metadata, create_only, update_only))
    console.print(f"[green]v[/] Registered namespace [cyan]{escape(name)}[/]")


@namespace.command("deregister")
@click.argument("name")
@_fail_option
@click.pass_obj
@_handle_errors
def namespace_deregister(state: _State, name: str, fail_if_not_exists: bool):
    """Delete a namespace, with all its services and endpoints."""
    state.registry.namespace(name).deregister(*_deregister_opts(fail_if_not_exists))
    console.print(f"[green]v[/] Deregistered namespace [cyan]{escape(name)}[/]")


@namespace.command("list")
@_name_in_option
@_prefix_option
@_kv_option
@_results_option
@_output_option
@click.pass_obj
@_handle_errors
def namespace_list(state: _State, name_in, prefix, kv, results, output: str):
    """List namespaces."""
    from regbridge.core import ANY

    it = state.registry.namespace(ANY).list(*_list_opts(name_in, prefix, kv, results))
    _show([ns for ns, _ in it], output, "Namespaces")


# ── Services ─────────────────────────────────────────────────────────


@main.group()
def service():
    """Manage the services of a namespace."""


@service.command("get")
@click.argument("namespace_name")
@click.argument("name")
@_force_refresh_option
@_output_option
@click.pass_obj
@_handle_errors
def service_get(state: _State, namespace_name: str, name: str, force_refresh: bool, output: str):
    """Show a service."""
    svc = state.registry.namespace(namespace_name).service(name).get(*_get_opts(force_refresh))
    _show([svc], output, "Services")


@service.command("register")
@click.argument("namespace_name")
@click.argument("name")
@_kv_option
@_replace_option
@_create_only_option
@_update_only_option
@click.pass_obj
@_handle_errors
def service_register(state: _State, namespace_name: str, name: str, kv, replace_metadata: bool, create_only: bool, update_only: bool):
    """Create or update a service."""
    op = state.registry.namespace(namespace_name).service(name)
    op.register(*_register_opts(kv, replace_metadata, create_only, update_only))
    console.print(f"[green]v[/] Registered service [cyan]{escape(op.path)}[/]")


@service.command("deregister")
@click.argument("namespace_name")
@click.argument("name")
@_fail_option
@click.pass_obj
@_handle_errors
def service_deregister(state: _State, namespace_name: str, name: str, fail_if_not_exists: bool):
    """Delete a service, with all its endpoints."""
    op = state.registry.namespace(namespace_name).service(name)
    op.deregister(*_deregister_opts(fail_if_not_exists))
    console.print(f"[green]v[/] Deregistered service [cyan]{escape(op.path)}[/]")


@service.command("list")
@click.argument("namespace_name")
@_name_in_option
@_prefix_option
@_kv_option
@_results_option
@_output_option
@click.pass_obj
@_handle_errors
def service_list(state: _State, namespace_name: str, name_in, prefix, kv, results, output: str):
    """List the services of a namespace."""
    from regbridge.core import ANY

    it = state.registry.namespace(namespace_name).service(ANY).list(
        *_list_opts(name_in, prefix, kv, results)
    )
    _show([svc for svc, _ in it], output, "Services")


# ── Endpoints ────────────────────────────────────────────────────────


@main.group()
def endpoint():
    """Manage the endpoints of a service."""


@endpoint.command("get")
@click.argument("namespace_name")
@click.argument("service_name")
@click.argument("name")
@_force_refresh_option
@_output_option
@click.pass_obj
@_handle_errors
def endpoint_get(state: _State, namespace_name: str, service_name: str, name: str, force_refresh: bool, output: str):
    """Show an endpoint."""
    op = state.registry.namespace(namespace_name).service(service_name).endpoint(name)
    _show([op.get(*_get_opts(force_refresh))], output, "Endpoints")


@endpoint.command("register")
@click.argument("namespace_name")
@click.argument("service_name")
@click.argument("name", required=False, default="")
@click.option("--address", default=None, help="IPv4 or IPv6 address")
@click.option("--port", type=int, default=None, help="Port number")
@click.option("--generate-name", is_flag=True, help="Generate a name from the service's one")
@_kv_option
@_replace_option
@_create_only_option
@_update_only_option
@click.pass_obj
@_handle_errors
def endpoint_register(
    state: _State,
    namespace_name: str,
    service_name: str,
    name: str,
    address: str | None,
    port: int | None,
    generate_name: bool,
    kv,
    replace_metadata: bool,
    create_only: bool,
    update_only: bool,
):
    """Create or update an endpoint.

    NAME can be omitted together with --generate-name.
    """
    from regbridge.options import register as reg

    opts = _register_opts(kv, replace_metadata, create_only, update_only)
    if address is not None:
        opts.append(reg.with_address(address))
    if port is not None:
        opts.append(reg.with_port(port))
    if generate_name:
        opts.append(reg.with_generate_name())

    op = state.registry.namespace(namespace_name).service(service_name).endpoint(name)
    op.register(*opts)
    console.print(f"[green]v[/] Registered endpoint [cyan]{escape(op.path)}[/]")


@endpoint.command("deregister")
@click.argument("namespace_name")
@click.argument("service_name")
@click.argument("name")
@_fail_option
@click.pass_obj
@_handle_errors
def endpoint_deregister(state: _State, namespace_name: str, service_name: str, name: str, fail_if_not_exists: bool):
    """Delete an endpoint."""
    op = state.registry.namespace(namespace_name).service(service_name).endpoint(name)
    op.deregister(*_deregister_opts(fail_if_not_exists))
    console.print(f"[green]v[/] Deregistered endpoint [cyan]{escape(op.path)}[/]")


@endpoint.command("list")
@click.argument("namespace_name")
@click.argument("service_name")
@_name_in_option
@_prefix_option
@_kv_option
@click.option("--cidr", default=None, help="Only list addresses inside this network")
@click.option("--port-in", type=int, multiple=True, help="Only list these ports (repeatable)")
@_results_option
@_output_option
@click.pass_obj
@_handle_errors
def endpoint_list(state: _State, namespace_name: str, service_name: str, name_in, prefix, kv, cidr, port_in, results, output: str):
    """List the endpoints of a service."""
    from regbridge.core import ANY
    from regbridge.options import listing

    opts = _list_opts(name_in, prefix, kv, results)
    if cidr:
        opts.append(listing.with_cidr(cidr))
    if port_in:
        opts.append(listing.with_port_in(*port_in))

    it = state.registry.namespace(namespace_name).service(service_name).endpoint(ANY).list(*opts)
    _show([ep for ep, _ in it], output, "Endpoints")


if __name__ == "__main__":
    main()
