"""Synexa-SIS - school information system for Angolan schools"""

__version__ = "1.0.0"
