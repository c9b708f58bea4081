from mp3_info.mp3_info import (
    InvalidFieldError,
    InvalidFileError,
    Metadata,
    Mp3InfoError,
    format_duration,
    load,
)

__all__ = [
    "InvalidFieldError",
    "InvalidFileError",
    "Metadata",
    "Mp3InfoError",
    "format_duration",
    "load",
]
