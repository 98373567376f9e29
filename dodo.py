from doit.action import CmdAction


def task_format():
    """Format code using ruff."""

    def router(help=False):
        if help:
            return """echo '
Code Formatter Help
=================

This task runs the ruff formatter to ensure consistent code style:
- Sorts imports (ruff check --select I --fix)
- Formats code (ruff format)

No options required - simply run:
  doit format
  '"""
        return "ruff check --select I --fix . && ruff format . "

    return {
        "actions": [CmdAction(router)],
        "params": [
            {
                "name": "help",
                "long": "help",
                "default": False,
                "type": bool,
            },
        ],
        "verbosity": 2,
    }


def task_test():
    """Run the test suite using pytest."""

    def router(help=False, keyword=""):
        if help:
            return """echo '
Test Runner Help
================

Runs the pytest suite under tests/:
- doit test                  run everything
- doit test --keyword=time   run tests whose names match an expression
  '"""
        if keyword:
            return f"pytest tests -k '{keyword}'"
        return "pytest tests"

    return {
        "actions": [CmdAction(router)],
        "params": [
            {
                "name": "help",
                "long": "help",
                "default": False,
                "type": bool,
            },
            {
                "name": "keyword",
                "long": "keyword",
                "short": "k",
                "default": "",
                "type": str,
            },
        ],
        "verbosity": 2,
    }
