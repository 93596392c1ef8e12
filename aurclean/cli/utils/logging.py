import logging
import sys

import click


logger = logging.getLogger("aurclean")


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def _set_debug(ctx, param, value: bool):
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)

    # A subcommand may switch debug on, only the root group switches it off
    if ctx is root_ctx:
        root_ctx.obj["DEBUG"] = value
    elif value:
        root_ctx.obj["DEBUG"] = True

    debug = root_ctx.obj.get("DEBUG", False)
    configure_logging(debug)
    return debug


debug_option = click.option(
    "--debug/--no-debug",
    default=False,
    is_eager=True,
    expose_value=False,
    callback=_set_debug,
    help="Enable debug mode",
)
