"""
Metabohyp — hypothesis generation for differential metabolomics data.
"""

__version__ = "0.1.0"
