#!/usr/bin/env python3
"""
MiniC Front-End Demo
====================

This script demonstrates how to use the minic package to:
1. Preprocess source with macros and conditional blocks
2. Scan the result into tokens
3. Recover from lexical errors and report them
4. Peek at upcoming tokens

Usage:
    pip install -e .
    python examples/front_end_demo.py
"""

from pathlib import Path

from minic import FrontEnd, PipelineOptions, Scanner
from minic.errors import ErrorCollector, PreprocessorError


def main():
    sample = Path(__file__).with_name("sample.mc")

    # ==========================================================================
    # 1. Preprocess and scan a file
    # ==========================================================================
    # Defines given here act like -D on the command line.

    print(f"Analyzing {sample.name} with DEBUG defined...")
    front_end = FrontEnd(PipelineOptions(defines={"DEBUG": ""}))
    result = front_end.analyze_file(sample)

    print(f"  Tokens: {len(result.tokens)}")
    print(f"  Errors: {len(result.errors)}")
    for token in result.tokens[:8]:
        print(f"    {token}")

    # ==========================================================================
    # 2. Error recovery
    # ==========================================================================
    # scan_all records each error, skips one character and keeps going.

    print("\nScanning source with errors...")
    scanner = Scanner('int x = @ 5;\nstring s = "open')
    tokens, errors = scanner.scan_all()

    collector = ErrorCollector()
    collector.extend(errors)
    print(collector.report())
    print(f"  Recovered tokens: {[token.lexeme for token in tokens]}")
    print(f"  {scanner.recovery.debug_info()}")

    # ==========================================================================
    # 3. Peeking
    # ==========================================================================

    print("\nPeeking does not move the scanner:")
    scanner = Scanner("while (i < 10)")
    print(f"  peek -> {scanner.peek_token()}")
    print(f"  next -> {scanner.next_token()}")
    print(f"  next -> {scanner.next_token()}")

    # ==========================================================================
    # 4. Preprocessor errors are fatal
    # ==========================================================================

    print("\nRecursive macros stop preprocessing:")
    try:
        FrontEnd().analyze_source("#define A B\n#define B A\nint x = A;")
    except PreprocessorError as e:
        print(e)


if __name__ == "__main__":
    main()
