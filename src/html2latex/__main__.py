"""Allow ``python -m html2latex``."""

from html2latex.ui.cli import main


if __name__ == "__main__":
    main()
