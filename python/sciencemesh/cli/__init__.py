"""
a module that defines the top-level command-line programs for the ScienceMesh storage packages.
"""
