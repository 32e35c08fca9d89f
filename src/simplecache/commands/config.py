"""Config commands -- view the resolved cache configuration.

Provides the ``simplecache config`` sub-command group. Settings are never
written by the CLI; they come from the root options, the
``SIMPLE_CACHE_DIRECTORY``/``SIMPLE_CACHE_ENABLED`` environment variables
and ``./simplecache.json``.
"""

from __future__ import annotations

import typer

from simplecache.output import error, format_data, info


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the settings a cache would be built with.

    Example::

        simplecache config show
        simplecache --json config show
    """
    from simplecache.config import load_project_config, resolve_settings
    from simplecache.exceptions import ConfigError

    obj = ctx.obj or {}
    try:
        settings = resolve_settings(
            cli_directory=obj.get("directory"), cli_enabled=obj.get("enabled")
        )
        project = load_project_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if project is not None:
        info("Project config: simplecache.json")
    data = settings.model_dump(mode="json")
    data["active"] = settings.is_active
    format_data(data)
