# src/taml/cli/formatter.py
import difflib
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from taml.core.models import Severity, ValidationResult


class TamlFormatter:
    """
    TamlFormatter: The visual heart of the CLI.
    Renders diagnostics, diffs, file info and batch reports on the console
    it is given.
    """

    def __init__(self, console: Console):
        self.console = console

    def print_header(self, subtitle: str, version: str):
        self.console.print(Panel.fit(
            f"[bold cyan]TAML Toolkit v{version}[/bold cyan]\n"
            "══════════════════════════════════════════",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def print_validation(self, name: str, result: ValidationResult,
                         source: str = "", verbose: bool = False):
        """
        Prints the verdict for one file followed by a diagnostics table.
        In verbose mode each row also shows the offending source line.
        """
        if result.is_valid:
            self.console.print(f"[bold green]✓ '{name}' is valid TAML[/bold green]")
            if verbose:
                self.console.print(f"  Lines: {len(source.split(chr(10)))}")
        else:
            self.console.print(
                f"[bold red]✗ '{name}' has {len(result.errors)} validation error(s):[/bold red]")

        if not result.diagnostics:
            return

        source_lines = source.split("\n")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Line", justify="right")
        table.add_column("Col", justify="right")
        table.add_column("Severity")
        table.add_column("Kind", style="cyan")
        table.add_column("Message")
        if verbose:
            table.add_column("Source", style="dim")

        for d in result.diagnostics:
            color = "red" if d.severity is Severity.ERROR else "yellow"
            row = [str(d.line), str(d.column), f"[{color}]{d.severity.value}[/{color}]",
                   d.kind.value, d.message]
            if verbose:
                text = source_lines[d.line - 1] if d.line <= len(source_lines) else ""
                # Make the invisible structure visible
                row.append(text.replace("\t", "→").replace(" ", "·"))
            table.add_row(*row)

        self.console.print(table)

    def display_diff(self, original_text: str, formatted_text: str, file_name: str):
        """
        Renders a colorized unified diff between the original document
        and its canonical form.
        """
        if not formatted_text or not original_text:
            return

        diff_list = list(difflib.unified_diff(
            original_text.splitlines(),
            formatted_text.splitlines(),
            fromfile=f"original/{file_name}",
            tofile=f"canonical/{file_name}",
            lineterm=""
        ))

        if not diff_list:
            self.console.print(f"[dim]ℹ No formatting changes needed for {file_name}.[/dim]")
            return

        diff_output = "\n".join(diff_list).replace("\t", "→   ")
        syntax = Syntax(diff_output, "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"Proposed Formatting: {file_name}", border_style="green"))

    def print_info(self, info: Dict[str, Any]):
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("File", info["name"])
        table.add_row("Size", f"{info['size']} bytes")
        table.add_row("Lines", f"{info['lines']} total, {info['content_lines']} content, "
                               f"{info['comment_lines']} comments")
        status = "[green]Valid[/green]" if info["valid"] else f"[red]Invalid ({info['errors']} errors)[/red]"
        table.add_row("Status", status)
        if info.get("root_keys") is not None:
            table.add_row("Root keys", ", ".join(info["root_keys"]) or "(none)")
        self.console.print(table)

    def print_final_table(self, reports: List[Dict[str, Any]], summary: Dict[str, Any]):
        """
        Builds the summary table shown at the very end of a scan or fmt run.
        """
        table = Table(title="TAML Execution Report", show_lines=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Errors", justify="right")
        table.add_column("Warnings", justify="right")
        table.add_column("Result", justify="center")

        for r in reports:
            if r.get("status") in ("ENGINE_ERROR", "FILE_NOT_FOUND"):
                self.console.print(f"[bold red]Error in {r['file_path']}:[/bold red] {r.get('error')}")

            success = r.get("success", False)
            status_color = "green" if success else "red"
            table.add_row(
                str(r.get("file_path")),
                f"[{status_color}]{r.get('status', 'FAILED')}[/{status_color}]",
                str(r.get("error_count", "-")),
                str(r.get("warning_count", "-")),
                "✅" if success else "❌",
            )

        self.console.print(table)
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Files:     {summary['total_files']}\n"
            f"Valid:           [green]{summary['valid']}[/green]\n"
            f"Invalid:         [red]{summary['invalid']}[/red]\n"
            f"Formatted:       {summary['formatted']}\n"
            f"System Errors:   [red]{summary['system_errors']}[/red]\n"
            f"Backups Created: {summary['backups_created']}",
            border_style="dim"
        ))
