"""
TurnEdit - Version
==================

Import: from config.version import VERSION
"""

VERSION = "0.1.0"
