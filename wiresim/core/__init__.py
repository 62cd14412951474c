"""
wiresim core module.

Data types, configuration, units and persistence helpers.
"""
