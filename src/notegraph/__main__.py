"""Command-line interface: ``python -m notegraph [notes.json]``."""
from notegraph.main import main

if __name__ == "__main__":
    main()
