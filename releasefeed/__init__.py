"""
releasefeed - release listing harvester and catalog builder

Pipeline: harvester → parser → resolver → enricher → catalog
"""

__version__ = '1.0.0'
