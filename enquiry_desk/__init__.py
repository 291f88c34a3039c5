"""Enquiry Desk - lead pipeline and order back office for an enquiry-based store."""

__version__ = "1.0.0"
