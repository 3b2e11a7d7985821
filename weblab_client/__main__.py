"""Allows ``python -m weblab_client``."""

from weblab_client.cli.app import main

if __name__ == "__main__":
    main()
