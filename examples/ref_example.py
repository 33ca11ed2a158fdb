#!/usr/bin/env python3
"""
Example binding flags to free-standing variables with Ref.

Ref is a tiny holder for code that keeps its settings in separate variables
rather than in one object.
"""

import sys

from optionset import OptionSet, Ref

if __name__ == "__main__":
    name = Ref("world")
    times = Ref(1)
    shout = Ref(False)

    options = OptionSet()
    options.add(name, "value", "n", "name", "who to greet", "world")
    options.add(times, "value", "t", "times", "how many greetings", 1)
    options.add_switch(shout, "value", "s", "shout", "greet in upper case")

    # Simulate parsing arguments (replace with `None` to use CLI args)
    if not options.parse(["--name=reader", "-st", "2"]):
        sys.stderr.write(options.format_usage())
        sys.exit(2)

    greeting = f"hello, {name.value}"
    for _ in range(times.value):
        print(greeting.upper() if shout.value else greeting)
