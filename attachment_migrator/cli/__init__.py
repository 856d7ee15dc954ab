"""Command-line interface: the click group and its subcommands."""

__all__ = [
    "check_cmd",
    "commands",
    "common",
    "migrate_cmd",
    "report",
]
