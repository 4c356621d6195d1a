"""
Godot Asset Library API

A catalog backend for listing, searching, submitting and reviewing
add-ons and project templates.
"""

__version__ = "1.0.0"
