"""
CLI entry point, when used as a module: `python -m vkcci`.
"""
from vkcci import cli

if __name__ == '__main__':
    cli.main()
