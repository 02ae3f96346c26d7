"""
mediarelay

Media file relay: uploads land in object storage and are handed out as short,
expiring links that redirect to time-limited signed download URLs.
"""

__version__ = "0.1.0"
