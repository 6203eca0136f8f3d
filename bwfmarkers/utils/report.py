"""
Result reporting for the BWF Marker Export CLI.

Prints one row per input with its outcome, coloured by status.
"""

import logging
from collections.abc import Sequence

from colored import attr, bg, fg

from bwfmarkers.batch import ConversionStatus, FileResult
from bwfmarkers.utils.logger import get_logger


logger: logging.Logger = get_logger(__name__)

STATUS_COLORS: dict[ConversionStatus, str] = {
    ConversionStatus.CONVERTED: "green",
    ConversionStatus.NO_MARKERS: "yellow",
    ConversionStatus.FAILED: "red",
}


def color_txt(
    string: str, fg_color: str, bg_color: str, padding: int = 0
) -> str:
    """
    Colorizes a string.

    Arguments:
        string (str): String to be colorized.
        fg_color (str): Foreground color.
        bg_color (str): Background color.

    Returns:
        str: Colorized string.
    """
    if padding:
        string = string.ljust(padding)

    return f"{fg(fg_color)}{bg(bg_color)}{string}{attr('reset')}"


def describe_result(result: FileResult) -> str:
    """Returns the detail column for one result."""
    if result.status is ConversionStatus.CONVERTED:
        return f"{result.marker_count} markers -> {result.labels_file}"
    return result.error or ""


def print_results(results: Sequence[FileResult]) -> None:
    """
    Prints the batch outcome as a table.

    Arguments:
        results (Sequence[FileResult]): Results in input order.
    """
    logger.debug("Printing %d results.", len(results))
    if not results:
        return

    max_file_width: int = max(len(result.original_file) for result in results)
    max_status_width: int = max(len(str(result.status)) for result in results)

    print(color_txt("File", "black", "green", max_file_width + 1), end="")
    print(color_txt("Status", "black", "yellow", max_status_width + 1), end="")
    print(color_txt("Details", "black", "blue"))

    for result in results:
        file_str: str = result.original_file.ljust(max_file_width)
        status_str: str = color_txt(
            str(result.status), STATUS_COLORS[result.status], "black", max_status_width
        )
        print(f"{file_str} {status_str} {describe_result(result)}")
