"""Kinds of customer-facing documents that can be shared by public link."""

from enum import Enum


class DocumentKind(str, Enum):
    """Quotations, contracts and proposals share one public lifecycle."""
    QUOTATION = "quotation"
    CONTRACT = "contract"
    PROPOSAL = "proposal"

    @property
    def label(self) -> str:
        """Capitalised name used at the start of user-visible messages."""
        return self.value.capitalize()
