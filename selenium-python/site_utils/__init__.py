"""Shared helpers for the site e2e suite: settings, browser sessions and assertion utilities."""
