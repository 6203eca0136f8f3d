from .time_parser import parse_time
from .document import DocumentParseError, parse_document
from .locator import locate
from .labels import format_labels
from .converter import (
    ConversionResult,
    NoMarkersFoundError,
    convert,
    convert_file,
    output_file_name,
    write_labels,
)
