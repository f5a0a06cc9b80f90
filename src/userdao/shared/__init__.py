"""
Shared infrastructure: database executors and logging.
"""
