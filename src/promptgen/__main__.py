"""Allow ``python -m promptgen``."""

from promptgen.cli import main

if __name__ == "__main__":
    main()
