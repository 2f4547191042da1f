"""
mealcache Global Constants

Centralized location for package-wide constants.
"""

# Application Constants
APP_VERSION = "1.0.0"
