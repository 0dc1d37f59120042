#!/usr/bin/env python3
"""Convert a scan results JSONL file to Excel (.xlsx) format."""

import sys
from pathlib import Path

# Ensure src is on path when run from project root
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from content_scoring.tools.export_tool import jsonl_to_excel


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python jsonl_to_excel.py <input.jsonl> [output.xlsx]")
        print("\nExample:")
        print("  python jsonl_to_excel.py output/scans.jsonl")
        print("  python jsonl_to_excel.py output/scans.jsonl output/scans.xlsx")
        sys.exit(1)

    input_file = sys.argv[1]
    output_file = sys.argv[2] if len(sys.argv) > 2 else None
    try:
        written = jsonl_to_excel(input_file, output_file)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    print(f"Output file: {written.absolute()}")
