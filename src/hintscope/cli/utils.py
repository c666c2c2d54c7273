"""CLI utilities."""

import click

from hintscope.config import HintScopeConfig, load_config
from hintscope.config.models import LoggingConfig
from hintscope.core.errors import HintScopeError
from hintscope.core.logging import get_log_file_path

_CONSOLE_DESTINATIONS = ("stderr", "stdout")


def cli_logging_config(config: LoggingConfig, *, verbose: bool) -> LoggingConfig:
    """Adapt the configured logging outputs to a one-shot command.

    Console outputs without an explicit level are held at WARNING so command
    output stays readable; ``--verbose`` lowers everything to DEBUG. File
    outputs keep their configured levels.
    """
    if verbose:
        outputs = [
            output.model_copy(update={"level": "DEBUG"})
            if output.destination in _CONSOLE_DESTINATIONS
            else output
            for output in config.outputs
        ]
        return config.model_copy(update={"level": "DEBUG", "outputs": outputs})

    outputs = [
        output.model_copy(update={"level": "WARNING"})
        if output.destination in _CONSOLE_DESTINATIONS and output.level is None
        else output
        for output in config.outputs
    ]
    return config.model_copy(update={"outputs": outputs})


def command_config(ctx: click.Context) -> HintScopeConfig:
    """Config loaded by the ``hintscope`` group, or a fresh load when run standalone."""
    obj = ctx.find_object(dict)
    if obj is not None and isinstance(obj.get("config"), HintScopeConfig):
        return obj["config"]
    try:
        return load_config()
    except HintScopeError as e:
        raise command_error(e) from e


def command_error(error: HintScopeError) -> click.ClickException:
    """ClickException for ``error``, pointing at the log file when one is configured."""
    log_file = get_log_file_path()
    if log_file is not None:
        return click.ClickException(f"{error}. See {log_file} for details.")
    return click.ClickException(str(error))
