"""Stemcell CLI package."""
