"""
Argv preprocessor for the sync-then-exec command line.

``poe2filter [OPTIONS] [DESCRIPTOR...] -- COMMAND [ARG...]``

Everything after the first ``--`` belongs to the chained command and must
reach it untouched, including its own ``--`` and option-looking tokens.
Typer would swallow the separator, so the split happens before Typer sees
the arguments.
"""

SEPARATOR = "--"


def split_command_argv(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first ``--``.

    Returns:
        (sync arguments, command to execute); the command is empty when
        there is no separator or nothing follows it
    """
    if SEPARATOR not in argv:
        return list(argv), []
    index = argv.index(SEPARATOR)
    return argv[:index], argv[index + 1 :]
