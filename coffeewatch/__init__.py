"""Storefront availability monitor."""
