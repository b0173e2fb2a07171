"""
Command line interface for SBOM analytics.
"""
