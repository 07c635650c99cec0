"""
envedit CLI - Structured .env editor

Main entry point for the envedit command-line tool.
"""

import logging
import sys

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.config import EditorConfig
from .core.editor import Editor
from .core.errors import EditorError, KeyNotFoundError


console = Console()


def setup_logging(verbose: bool):
    """Route envedit logs through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def fail(message: str):
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def open_editor(ctx) -> Editor:
    """Create an editor for the file selected by the group options."""
    config = ctx.obj['config']
    try:
        return Editor(ctx.obj['filepath'], config=config)
    except EditorError as e:
        fail(str(e))


def save_editor(editor: Editor):
    try:
        editor.save()
    except EditorError as e:
        fail(str(e))


@click.group()
@click.option('--project-root', default=None, help='Project root directory')
@click.option('--filepath', default=None, help='File to edit (default: .env in the project root)')
@click.option('--dialect', default=None, help='Parser dialect (v1, v2, v3)')
@click.option('--verbose', is_flag=True, help='Show debug logging')
@click.pass_context
def cli(ctx, project_root, filepath, dialect, verbose):
    """
    envedit - Edit .env files without losing their formatting
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['config'] = EditorConfig.from_env(project_root=project_root, dialect=dialect)
    ctx.obj['filepath'] = filepath


@cli.command(name="get-keys")
@click.pass_context
def get_keys(ctx):
    """
    List all setters in the file.

    Displays: Key, Use export, Value, Comment, and In line.
    """
    editor = open_editor(ctx)
    all_keys = editor.get_keys()

    console.print("[cyan]Loading keys in your file...[/cyan]")
    console.print()

    table = Table(title=str(editor.file_path), box=box.ROUNDED)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Use export", style="magenta")
    table.add_column("Value", style="green")
    table.add_column("Comment", style="yellow")
    table.add_column("In line", style="blue")

    for key, info in all_keys.items():
        table.add_row(
            key,
            "true" if info['export'] else "false",
            info['value'],
            info['comment'],
            str(info['line'] or ""),
        )

    console.print(table)
    console.print()
    console.print(f"[green]You have total {len(all_keys)} keys in your file[/green]")


@cli.command(name="get-key")
@click.argument('key')
@click.pass_context
def get_key(ctx, key):
    """Print the value of KEY."""
    editor = open_editor(ctx)
    try:
        click.echo(editor.get_value(key))
    except KeyNotFoundError as e:
        fail(str(e))


@cli.command(name="set-key")
@click.argument('key')
@click.argument('value', default="")
@click.option('--comment', default=None, help='Inline comment for the setter')
@click.option('--export/--no-export', default=None, help='Lead the line with "export "')
@click.pass_context
def set_key(ctx, key, value, comment, export):
    """
    Set KEY to VALUE and save.

    Existing keys are updated in place and keep their comment and export
    state unless given.
    """
    editor = open_editor(ctx)
    existed = editor.key_exists(key)
    editor.set_key(key, value, comment, export)
    save_editor(editor)

    verb = "Updated" if existed else "Added"
    console.print(f"[green]✓ {verb} '{key}'[/green]")


@cli.command(name="delete-key")
@click.argument('keys', nargs=-1, required=True)
@click.pass_context
def delete_key(ctx, keys):
    """Delete one or more KEYS and save."""
    editor = open_editor(ctx)
    missing = [key for key in keys if not editor.key_exists(key)]
    editor.delete_keys(keys)
    save_editor(editor)

    for key in missing:
        console.print(f"[yellow]Key '{key}' was not set[/yellow]")
    console.print(f"[green]✓ Deleted {len(keys) - len(missing)} key(s)[/green]")


@cli.command(name="add-comment")
@click.argument('text')
@click.pass_context
def add_comment(ctx, text):
    """Append a comment line and save."""
    editor = open_editor(ctx)
    editor.add_comment(text)
    save_editor(editor)
    console.print("[green]✓ Comment added[/green]")


@cli.command()
@click.option('--from', 'restore_path', default=None, help='Backup file to restore from')
@click.pass_context
def restore(ctx, restore_path):
    """
    Restore the file from a backup.

    Uses the newest *.backup file in the backup directory unless --from is given.
    """
    config = ctx.obj['config']
    try:
        editor = Editor(config=config)
        editor.file_path = config.resolve_path(ctx.obj['filepath'])
        editor.restore(restore_path)
    except EditorError as e:
        fail(str(e))

    console.print(f"[green]✓ Restored {editor.file_path}[/green]")


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
