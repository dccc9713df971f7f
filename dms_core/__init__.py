"""
DMS client core: managed local file store, switchable mock/real document
backends and the local document filter engine.
"""
__version__ = "0.1.0"
