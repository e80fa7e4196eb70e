"""
Interface package: text front ends for the solve engine.

Modules:
    console: Line-oriented command loop on stdin/stdout.
              Can be run as a module: python -m interface.console
"""
