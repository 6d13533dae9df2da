"""notekb -- a searchable, question-answering knowledge base over OneNote."""

__version__ = "0.1.0"
