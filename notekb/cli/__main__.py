"""Allow ``python -m notekb.cli`` execution."""

from notekb.cli.kb import main

main()
