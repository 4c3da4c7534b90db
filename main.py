import asyncio
import sys

import config_paths
from document_engine import DocumentEngine
from file_type_handler import FileTypeHandler, UnsupportedFileType
from logging_utils import setup_logging
from persistence_gateway import JsonFileGateway

try:
    from _version import __version__
except Exception:
    __version__ = "0.0.0"


USAGE = (
    "annotab - annotation CSV editor store\n\nUsage:\n"
    "  annotab [--store DIR] [--verbose] show\n"
    "  annotab [--store DIR] [--verbose] columns\n"
    "  annotab [--store DIR] [--verbose] import FILE\n"
    "  annotab [--store DIR] [--verbose] export [PATH]\n"
    "  annotab [--store DIR] [--verbose] add-column NAME [--enum OPTION ...]\n"
    "  annotab [--store DIR] [--verbose] remove-column NAME\n"
    "  annotab -v\n"
)


def _split_options(args: list[str]):
    store = None
    verbose = False
    rest = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--store":
            if i + 1 >= len(args):
                raise ValueError("--store needs a directory")
            store = args[i + 1]
            i += 2
            continue
        if arg == "--verbose":
            verbose = True
        else:
            rest.append(arg)
        i += 1
    return store, verbose, rest


def _format_columns(engine: DocumentEngine) -> str:
    lines = []
    widths = engine.column_widths
    for name in engine.headers:
        options = engine.options_for(name)
        if name in engine.constrained_columns:
            lines.append(f"{name} [{widths[name]}] (enum): {', '.join(options)}")
        else:
            lines.append(f"{name} [{widths[name]}]")
    return "\n".join(lines)


async def _run(command: str, params: list[str], store: str) -> int:
    cfg = config_paths.load_config()
    engine = DocumentEngine(
        JsonFileGateway(store),
        cfg,
        set_status=lambda msg, _secs: print(msg, file=sys.stderr),
    )
    await engine.load_default()

    rc = 0
    if command == "show":
        print(engine.export_text())
    elif command == "columns":
        print(_format_columns(engine))
    elif command == "import":
        if len(params) != 1:
            print(USAGE, file=sys.stderr)
            return 2
        handler = FileTypeHandler(params[0])
        result = await engine.load_file(handler.read_bytes())
        rc = 0 if result else 1
    elif command == "export":
        handler = FileTypeHandler.for_export(params[0] if params else None)
        handler.save(engine.export_text())
        print(handler.path)
    elif command == "add-column":
        if not params:
            print(USAGE, file=sys.stderr)
            return 2
        name, extra = params[0], params[1:]
        is_enum = bool(extra) and extra[0] == "--enum"
        result = engine.add_column(name, is_constrained=is_enum, initial_options=extra[1:] if is_enum else ())
        rc = 0 if result else 1
    elif command == "remove-column":
        if len(params) != 1:
            print(USAGE, file=sys.stderr)
            return 2
        rc = 0 if engine.remove_column(params[0]) else 1
    else:
        print(USAGE, file=sys.stderr)
        return 2

    await engine.flush()
    return rc


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    if "-v" in args or "-V" in args:
        print(__version__)
        return 0

    if "-h" in args or "--help" in args or not args:
        print(USAGE)
        return 0

    try:
        store, verbose, rest = _split_options(args)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    if not rest:
        print(USAGE, file=sys.stderr)
        return 2

    setup_logging(verbose)
    if store is None:
        config_paths.ensure_config_dirs()
        store = config_paths.STORE_DIR

    try:
        return asyncio.run(_run(rest[0], rest[1:], store))
    except UnsupportedFileType as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"File error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
