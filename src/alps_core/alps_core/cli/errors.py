# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Actionable error display for the command line.

Known failure messages are matched against :data:`ERROR_PATTERNS` to add a
one-line fix. Parse failures can also show the offending profile lines.
"""

import re
from typing import Optional, Tuple

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)

ERROR_PATTERNS = {
    "graphviz": {
        "pattern": r"(graphviz executable not found|failed to execute.*dot|\"dot\" not found)",
        "message": "Graphviz is not installed",
        "action": "Install Graphviz (e.g. `apt install graphviz`) or use the `dot` command",
    },
    "format": {
        "pattern": r"(must be valid json or xml|unsupported profile format)",
        "message": "Unrecognized profile format",
        "action": "A profile must start with `{` (JSON) or `<` (XML)",
    },
    "json": {
        "pattern": r"invalid json format",
        "message": "Malformed JSON profile",
        "action": "Fix the syntax error at the reported line, e.g. a trailing comma",
    },
    "xml": {
        "pattern": r"invalid xml format",
        "message": "Malformed XML profile",
        "action": "Check that every element is closed and attributes are quoted",
    },
    "permission": {
        "pattern": r"(permission denied|access denied)",
        "message": "Permission denied",
        "action": "Check file permissions on the profile and the output path",
    },
    "missing": {
        "pattern": r"(no such file or directory|file not found)",
        "message": "File not found",
        "action": "Check the profile path",
    },
}


def detect_error_pattern(output: str) -> Optional[Tuple[str, str]]:
    for pattern_info in ERROR_PATTERNS.values():
        if re.search(pattern_info["pattern"], output, re.IGNORECASE):
            return (pattern_info["message"], pattern_info["action"])
    return None


def excerpt(source: str, line: int, radius: int = 2) -> Text:
    """Return the lines around 1-based *line*, numbered, with the fault marked."""
    lines = source.splitlines()
    first = max(1, line - radius)
    last = min(len(lines), line + radius)
    width = len(str(last))
    text = Text()
    for number in range(first, last + 1):
        marker = ">" if number == line else " "
        style = "bold red" if number == line else "dim"
        text.append(f"{marker} {number:>{width}} │ ", style=style)
        text.append(lines[number - 1] + "\n")
    return text


def show_error(
    title: str,
    output: str,
    log_file: Optional[str] = None,
    source: Optional[str] = None,
    line: Optional[int] = None,
):
    """Print *title* in a panel with a suggested fix, the error text and, for
    parse errors, the profile lines around *line*.
    """
    body = [Text(f"✗ {title}", style="bold red")]
    detected = detect_error_pattern(output)
    if detected:
        message, action = detected
        body.append(Text(f"\n{message}", style="red"))
        body.append(Text.assemble(("\n→ Fix: ", "bold yellow"), (action, "yellow")))

    console.print()
    console.print(Panel(Group(*body), border_style="red", expand=False))

    details = output.strip().splitlines()[-10:]
    if details:
        console.print("\n[dim]Details:[/dim]")
        for detail in details:
            console.print(Text.assemble(("  │ ", "dim"), detail))

    if source is not None and line:
        console.print()
        console.print(excerpt(source, line), end="")

    if log_file:
        console.print(f"\n[dim]Full logs: {log_file}[/dim]")
    console.print()


def show_success(message: str):
    console.print(f"[green]✓[/green] {message}", style="green")
