"""Development entry point."""

from powerpal_exporter.cli import main

if __name__ == "__main__":
    main()
