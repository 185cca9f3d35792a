"""
autocommitter - automatic git commits with AI-generated conventional
commit messages, ranked provider failover and version bumping.
"""

__version__ = "0.1.0"
