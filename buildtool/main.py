#!/usr/bin/env python3
"""
Main entry point for buildtool.
"""
from .cli.build_cli import cli


def main():
    """Run the buildtool command line."""
    cli(obj={})


if __name__ == "__main__":
    main()
