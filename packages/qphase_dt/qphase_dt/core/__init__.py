"""qphase_dt: Core Subpackage
--------------------------
Configuration models and loading, protocols, errors and shared utilities.
"""
