"""
hello-bigtable: Cloud Bigtable Hello World

Connects to a Cloud Bigtable instance, creates a table, writes greetings,
reads one back, scans them all and deletes the table, while reporting
client metrics to the console and to Cloud Monitoring.
"""

__version__ = "1.0.0"
