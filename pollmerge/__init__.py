"""
Polling-place merge.

Reconciles a voter address table with a polling-location file on a
canonical precinct key and writes the joined result.
"""

__version__ = "0.1.0"
