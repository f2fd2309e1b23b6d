"""Module entrypoint for ``python -m lazyblame``.

All argument parsing and runtime setup happen in ``lazyblame.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
