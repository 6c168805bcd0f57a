"""Run a single management command: python -m codexsun.cli <command>"""
from codexsun.cli import main

if __name__ == "__main__":
    main()
