"""
icons.py - Status markers for console output.
"""

SUCCESS = "✅"
WARNING = "⚠️"
ERROR = "❌"
