#!/usr/bin/env python3
"""
DDT Parser - Main Entry Point.

Command-line interface over the extraction engine: loads OCR output
files, parses each one into a structured delivery note record and writes
the records as JSON, optionally evaluating them against ground truth.

Usage:
    Command Line:
        python main.py --input scan_001.json
        python main.py --input ./scans/ --output results.json
        python main.py --input ./scans/ --evaluate --ground-truth data/ground_truth.json

    Python:
        from main import run_extraction
        results = run_extraction("scan_001.txt", optical_confidence=85)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from config import ConfigurationManager
from ddt_parser.utils.logger import setup_logger_from_config, get_logger
from ddt_parser.utils.helpers import ensure_directory
from ddt_parser.utils.exceptions import DDTParserError
from ddt_parser.extraction import DDTExtractor, ParsedDocument
from ddt_parser.input_handler import InputHandler


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="ddt-parse",
        description="Extract structured data from the OCR text of delivery notes (DDT)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Parse a single OCR result:
        ddt-parse --input scan_001.json

    Parse a directory and save the records:
        ddt-parse --input ./scans/ --output results.json

    With evaluation:
        ddt-parse --input ./scans/ --evaluate --ground-truth data/ground_truth.json
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="OCR result file (.txt/.json) or directory of OCR results"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output JSON file (default: print to stdout)"
    )

    parser.add_argument(
        "--optical-confidence",
        type=float,
        default=None,
        help="OCR confidence (0-100) for inputs that do not carry one"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Evaluate the parsed records against ground truth"
    )

    parser.add_argument(
        "--ground-truth", "-gt",
        type=str,
        default=None,
        help="Path to ground truth file for evaluation"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)
    if args.evaluate and not args.ground_truth:
        parser.error("--evaluate requires --ground-truth")
    return args


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    root_logger = setup_logger_from_config()
    if args.debug:
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.setLevel(logging.DEBUG)

    logger = get_logger(__name__)
    logger.info(f"DDT parser {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_extraction(
    input_path: str,
    optical_confidence: Optional[float] = None
) -> List[Tuple[str, ParsedDocument]]:
    """
    Parse one OCR result file or every OCR result in a directory.

    Args:
        input_path: Path to a .txt/.json file or a directory.
        optical_confidence: Confidence used for inputs that carry none.

    Returns:
        List of (source file name, ParsedDocument) pairs.

    Example:
        >>> for name, document in run_extraction("scans/"):
        ...     print(name, document.document_number)
    """
    logger = get_logger(__name__)
    input_handler = InputHandler()
    extractor = DDTExtractor()

    path = Path(input_path)
    if path.is_dir():
        ocr_results = input_handler.load_batch(path)
    else:
        ocr_results = [input_handler.load(path)]

    results = []
    for ocr_result in ocr_results:
        confidence = ocr_result.confidence
        if confidence is None:
            confidence = optical_confidence

        document = extractor.extract(ocr_result.text, confidence)
        logger.info(
            f"{ocr_result.source_file}: DDT #{document.document_number or 'N/A'}, "
            f"{len(document.line_items)} line items, confidence {document.confidence}"
        )
        results.append((ocr_result.source_file, document))

    return results


def write_results(results: List[Tuple[str, ParsedDocument]], output_path: Optional[str]) -> None:
    """Write parsed documents as a JSON array to a file or stdout."""
    records = [
        {'source_file': source_file, **document.to_dict()}
        for source_file, document in results
    ]
    payload = json.dumps(records, indent=2, ensure_ascii=False)

    if output_path is None:
        print(payload)
        return

    output = Path(output_path)
    ensure_directory(output.parent)
    output.write_text(payload + "\n", encoding="utf-8")
    get_logger(__name__).info(f"Saved {len(records)} records to: {output}")


def run_evaluation(results: List[Tuple[str, ParsedDocument]], ground_truth_path: str) -> str:
    """Evaluate parsed documents and return the text report."""
    from ddt_parser.evaluation import Evaluator

    evaluator = Evaluator(ground_truth_path)
    evaluation = evaluator.evaluate(
        [document for _, document in results],
        source_files=[source_file for source_file, _ in results]
    )
    return evaluator.generate_report(evaluation)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, 1 for errors, 130 when interrupted).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        results = run_extraction(args.input, args.optical_confidence)
        if not results:
            logger.error("No files to process")
            return 1

        write_results(results, args.output)

        if args.evaluate:
            print(run_evaluation(results, args.ground_truth), file=sys.stderr)

        logger.info(f"Extraction complete. Processed {len(results)} files.")
        return 0

    except DDTParserError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
