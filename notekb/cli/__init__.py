"""Command-line tools for notekb.

- ``python -m notekb.cli`` (or the ``notekb`` console script) -- load
  OneNote pages, ask questions, search, inspect and delete the index.

Heavy imports (chromadb, LLM SDKs) are deferred inside the handlers to
keep ``--help`` fast.
"""
