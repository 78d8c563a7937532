"""Allow running UserDeck with ``python -m userdeck``."""

from userdeck import main

main()
