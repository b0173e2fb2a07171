"""
CLI commands: analyze, diagram, merge and export-tickets.
"""
