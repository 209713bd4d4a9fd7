"""Allow ``python -m commitbot``."""

from commitbot.cli import main


if __name__ == "__main__":
    main(prog_name="commitbot")
