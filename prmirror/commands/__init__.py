"""CLI command implementations."""

from prmirror.commands.document import cmd_ranges, cmd_show
from prmirror.commands.files import cmd_files
from prmirror.commands.parse_diff import cmd_parse_diff

__all__ = ["cmd_files", "cmd_parse_diff", "cmd_ranges", "cmd_show"]
