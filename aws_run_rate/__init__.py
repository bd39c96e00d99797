"""
AWS Run Rate reporting tool.

Ranks linked accounts of an AWS Organization by daily and month-to-date
spend and posts the table to Slack.
"""

__version__ = "1.0.0"
__author__ = "Platform Engineering"
