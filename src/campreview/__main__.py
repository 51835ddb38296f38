"""Allow ``python -m campreview``."""

from campreview.cli.preview import run

if __name__ == "__main__":
    run()
