"""
CLI entry point, when used as a module: `python -m gengc`.

Useful for debugging in the IDEs (use the start-mode "Module", module "gengc").
"""
from gengc import cli

if __name__ == '__main__':
    cli.main()
