"""Shared validators package for the application.

This package contains reusable validation functions used by the request
schemas of both features.

Available validators:
- password.py: Password length rules
- name.py: Display name normalization and length rules
"""
