"""
GitHub Actions runner channels — VisiHub Verify

PURPOSE:
    Everything the action says back to the runner goes through this module:

      - workflow commands on stdout (::group::, ::error::, ::notice::,
        ::add-mask::)
      - step outputs appended to the file named by GITHUB_OUTPUT
      - Markdown appended to the file named by GITHUB_STEP_SUMMARY

    Escaping follows the rules of the official Actions toolkit so that a
    dataset name containing "%" or a newline cannot break an annotation.
"""

import logging
import sys
import uuid
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class ActionsRunner:
    """Writer for the runner's stdout commands, outputs file and job summary."""

    def __init__(
        self,
        output_path: Optional[str] = None,
        summary_path: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        self.output_path = output_path
        self.summary_path = summary_path
        self.stream = stream if stream is not None else sys.stdout
        self.in_group = False

    # -- stdout ------------------------------------------------------------

    def log(self, line: str = ""):
        print(line, file=self.stream)

    def start_group(self, title: str):
        self._command("group", {}, title)
        self.in_group = True

    def end_group(self):
        """Close the open group. No-op when none is open."""
        if not self.in_group:
            return
        self._command("endgroup", {}, "")
        self.in_group = False

    def add_mask(self, value: str):
        if value:
            self._command("add-mask", {}, value)

    def error(self, message: str, title: Optional[str] = None):
        self._command("error", {"title": title} if title else {}, message)

    def notice(self, message: str, title: Optional[str] = None):
        self._command("notice", {"title": title} if title else {}, message)

    # -- files -------------------------------------------------------------

    def set_output(self, name: str, value: str):
        """Append one step output to GITHUB_OUTPUT."""
        if not self.output_path:
            logger.warning("GITHUB_OUTPUT is not set; output %s=%s not written", name, value)
            return

        if "\n" in value or "\r" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            entry = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
        else:
            entry = f"{name}={value}\n"

        with open(self.output_path, "a", encoding="utf-8") as f:
            f.write(entry)

    @property
    def has_step_summary(self) -> bool:
        return bool(self.summary_path)

    def append_step_summary(self, markdown: str):
        if not self.summary_path:
            return
        if not markdown.endswith("\n"):
            markdown += "\n"
        with open(self.summary_path, "a", encoding="utf-8") as f:
            f.write(markdown)

    # -- internals ---------------------------------------------------------

    def _command(self, command: str, properties: dict, message: str):
        line = f"::{command}"
        if properties:
            line += " " + ",".join(
                f"{key}={escape_property(str(value))}" for key, value in properties.items()
            )
        line += f"::{escape_data(message)}"
        self.log(line)


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")
