from lpn_query_toolkit.utils.formatters import (
    console,
    format_address,
    format_identifier,
    load_json,
    save_json_output,
)

__all__ = [
    "console",
    "format_address",
    "format_identifier",
    "load_json",
    "save_json_output",
]
