"""Allow `python -m restgate`."""

from restgate.cli import main

if __name__ == "__main__":
    main()
