"""CleanFlow public document acceptance service.

Tokenized public access to quotations, contracts and proposals, and the
conversion of accepted documents into scheduled jobs.
"""

__version__ = "0.1.0"
