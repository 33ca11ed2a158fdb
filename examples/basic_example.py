#!/usr/bin/env python3
"""
Basic example of using OptionSet with a dataclass holding the settings.

Run with -h to see the grouped usage text, or try:
    python basic_example.py -v --output result.txt -j 4
    python basic_example.py --bogus
"""

import sys
from dataclasses import dataclass

from optionset import OptionSet


@dataclass
class Settings:
    verbose: bool = False
    help: bool = False
    output: str = ""
    jobs: int = 1
    ratio: float = 1.0


if __name__ == "__main__":
    settings = Settings()
    options = OptionSet(header="Usage: basic_example.py [options]\n\n")

    options.add_switch(settings, "help", "h", "help", "show this help and exit")
    options.add_switch(settings, "verbose", "v", "verbose", "increase verbosity")
    options.add(
        settings, "output", "o", "output", "output file path", "out.txt", "Output"
    )
    options.add(
        settings,
        "jobs",
        "j",
        "jobs",
        "number of worker processes used to build the output; more jobs finish "
        "faster but use more memory",
        4,
        "Build",
    )
    options.add(settings, "ratio", long="ratio", default=0.5)  # undocumented

    result = options.safe_parse()
    if result.is_err():
        sys.stderr.write(f"error: {result.err()}\n\n{options.format_usage()}")
        sys.exit(2)
    if settings.help:
        sys.stdout.write(options.format_usage())
        sys.exit(0)

    print(settings)
