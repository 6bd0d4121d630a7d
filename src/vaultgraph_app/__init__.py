"""
vaultgraph app - Qt binding of the vaultgraph core.

View models run scans on worker threads and drive the force layout from a
QTimer on the UI thread.
"""

__version__ = "0.1.0"
