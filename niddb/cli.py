"""CLI entry point for niddb."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from niddb.core.database import NidDatabase
from niddb.core.exceptions import LoadError
from niddb.core.loader import NidLoader, get_default_nid_dir
from niddb.core.models import FunctionSignature, LibraryEntry
from niddb.formats.scalars import parse_u32

app = typer.Typer(
    name="niddb",
    help="Resolve NIDs of MIPS executable imports to names.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

DbOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--db",
        "-d",
        help="NID database file or directory (.xml, .json, .yml); repeatable",
        envvar="NIDDB_PATH",
    ),
]
FunctionsOption = Annotated[
    Path | None,
    typer.Option("--functions", "-f", help="Function signature file", envvar="NIDDB_FUNCTIONS"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


def open_database(db_paths: list[Path] | None, functions: Path | None = None) -> NidDatabase:
    """Create a database and load the given files, reporting load errors."""
    db = NidDatabase()
    paths = db_paths
    if not paths:
        default = get_default_nid_dir(Path(".").resolve())
        if default.exists():
            paths = [default]
        else:
            err_console.print(
                f"[yellow]No NID databases found.[/] Pass --db, set NIDDB_PATH or create {default}"
            )
            paths = []

    stats = NidLoader(db).load_paths(paths)
    for error in stats.errors:
        err_console.print(f"[red]Error:[/red] {error}")

    if functions is not None:
        try:
            db.load_signature_file(functions)
        except LoadError as e:
            err_console.print(f"[red]Error:[/red] {e}")

    return db


def parse_nid(value: str) -> int:
    """Parse a NID argument given in decimal or 0x-prefixed hex."""
    try:
        return parse_u32(value)
    except ValueError as e:
        raise typer.BadParameter(f"'{value}' is not a 32-bit NID") from e


def format_signature(signature: FunctionSignature) -> str:
    ret = signature.return_spec or "?"
    return f"{ret} {signature.name}({signature.argument_spec})"


def library_to_dict(entry: LibraryEntry) -> dict[str, object]:
    return {
        "name": entry.library_name,
        "image_name": entry.image_name,
        "image_file": entry.image_file,
        "flags": entry.flags,
        "kernel": entry.is_kernel,
        "functions": entry.function_count,
        "variables": entry.variable_count,
    }


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """Resolve NIDs of MIPS executable imports to names."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command()
def resolve(
    library: Annotated[str, typer.Argument(help="Library name (e.g. sceCtrl, syslib)")],
    nid: Annotated[str, typer.Argument(help="NID, decimal or 0x-prefixed hex")],
    db_paths: DbOption = None,
    functions: FunctionsOption = None,
    output_json: JsonOption = False,
) -> None:
    """Resolve a library NID to a name."""
    value = parse_nid(nid)

    with open_database(db_paths, functions) as db:
        result = db.lookup(library, value)
        signature = db.find_signature(result.name)

        if output_json:
            print(
                json.dumps(
                    {
                        "library": library,
                        "nid": f"0x{value:08X}",
                        "name": result.name,
                        "source": result.source.value,
                        "image_file": result.library.image_file if result.library else None,
                        "arguments": signature.argument_spec if signature else None,
                        "returns": signature.return_spec if signature else None,
                    }
                )
            )
            return

        console.print(f"[cyan]{result.name}[/cyan] [dim]({result.source.value})[/]")
        if result.library is not None:
            console.print(f"  [dim]{result.library.library_name} in {result.library.image_file}[/]")
        if signature is not None:
            console.print(f"  {format_signature(signature)}", markup=False)


@app.command()
def libs(
    name: Annotated[str | None, typer.Argument(help="Only show libraries with this name")] = None,
    db_paths: DbOption = None,
    output_json: JsonOption = False,
) -> None:
    """List loaded libraries, most recently loaded first."""
    with open_database(db_paths) as db:
        entries = [e for e in db.all_libraries() if name is None or e.library_name == name]

        if output_json:
            print(json.dumps([library_to_dict(e) for e in entries]))
            return

        if not entries:
            console.print("No libraries loaded")
            return
        master = db.libraries.master
        for entry in entries:
            marker = " [yellow]\\[master][/]" if entry is master else ""
            console.print(f"[cyan]{entry.library_name}[/cyan]{marker} [dim]{entry.image_file}[/]")
            console.print(
                f"  flags 0x{entry.flags:08X}, "
                f"{entry.function_count} functions, {entry.variable_count} variables"
            )


@app.command()
def deps(
    library: Annotated[str, typer.Argument(help="Library name")],
    db_paths: DbOption = None,
) -> None:
    """Show which image file declares a library."""
    with open_database(db_paths) as db:
        image_file = db.find_dependency(library)
        if image_file is None:
            console.print(f"No image declares '[cyan]{library}[/cyan]'")
            raise typer.Exit(code=1)
        console.print(image_file, markup=False)


@app.command()
def sig(
    name: Annotated[str, typer.Argument(help="Function name")],
    functions: Annotated[Path, typer.Option("--functions", "-f", envvar="NIDDB_FUNCTIONS")],
) -> None:
    """Look up the signature of a function."""
    with NidDatabase() as db:
        try:
            db.load_signature_file(functions)
        except LoadError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(code=1) from e

        signature = db.find_signature(name)
        if signature is None:
            console.print(f"No signature for '[cyan]{name}[/cyan]'")
            raise typer.Exit(code=1)
        console.print(format_signature(signature), markup=False)


@app.command()
def stats(
    db_paths: DbOption = None,
    functions: FunctionsOption = None,
    output_json: JsonOption = False,
) -> None:
    """Show database statistics."""
    with open_database(db_paths, functions) as db:
        result = db.get_stats()

        if output_json:
            print(json.dumps(result))
        else:
            console.print(f"Libraries: {result['libraries']}")
            console.print(f"Symbols: {result['symbols']}")
            console.print(f"Signatures: {result['signatures']}")
            if result["master"]:
                console.print(f"Master NID table: {result['master']}")


if __name__ == "__main__":
    app()
