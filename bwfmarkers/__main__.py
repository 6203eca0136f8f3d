"""
BWF Marker Export Tool

Entry point for converting markers embedded in Broadcast Wave files into
Audacity label files. Each WAV file is run through ``bwfmetaedit`` to obtain
its metadata XML; markers found in the XML are written to
``<name>_markers.txt`` in the output folder.

Usage:
    bwfmarkers take1.wav take2.wav --output-dir labels
    bwfmarkers --from-xml take1.xml --print
"""

import argparse
import logging
import sys
import time

from dotenv import load_dotenv
from halo import Halo

from bwfmarkers.batch import ConversionStatus, FileResult, process_batch
from bwfmarkers.config import reload_settings
from bwfmarkers.utils import configure_logging, display_elapsed_time, get_logger
from bwfmarkers.utils.report import print_results


logger: logging.Logger = get_logger("bwfmarkers")


def _build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="bwfmarkers",
        description="Convert BWF markers embedded in WAV files to Audacity labels",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="WAV files to convert (or XML files with --from-xml)",
    )
    parser.add_argument(
        "--from-xml",
        action="store_true",
        help="Treat inputs as metadata XML already extracted by bwfmetaedit",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Folder for generated label files (default: BWF_OUTPUT_DIR or ./outputs)",
    )
    parser.add_argument(
        "--print",
        dest="print_labels",
        action="store_true",
        help="Also write the generated labels to stdout",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (overrides LOG_LEVEL)",
    )
    return parser


def main() -> None:
    """
    Main function to handle the command line interface logic.
    """
    args: argparse.Namespace = _build_parser().parse_args()

    load_dotenv()
    settings = reload_settings()
    configure_logging(args.log_level)

    logger.info("Starting marker export for %d files...", len(args.files))
    start_time: float = time.time()
    with Halo(text="Converting markers", spinner="dots", text_color="green"):
        results: list[FileResult] = process_batch(
            args.files,
            from_xml=args.from_xml,
            output_dir=args.output_dir,
            settings=settings,
        )

    print_results(results)
    if args.print_labels:
        for result in results:
            if result.content:
                sys.stdout.write(result.content)

    logger.info(
        "Marker export completed in %s",
        display_elapsed_time(time.time() - start_time),
    )
    failed = [result for result in results if result.status is ConversionStatus.FAILED]
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
