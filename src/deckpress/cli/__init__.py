from .common import (
    ProgressPrinter,
    exit_with_message,
    resolve_output_path,
    write_json_output,
)

from .handlers import (
    handle_export_pdf,
    handle_export_zip,
    handle_formats,
    handle_import_list,
    handle_sets,
)

__all__ = [
    "ProgressPrinter",
    "exit_with_message",
    "resolve_output_path",
    "write_json_output",
    "handle_export_pdf",
    "handle_export_zip",
    "handle_formats",
    "handle_import_list",
    "handle_sets",
]
