"""Pytest configuration and fixtures."""

import os

# Set env before any module imports config (settings are loaded at import time).
os.environ.setdefault("SITE_CONFIG_FILE", os.path.join(os.getcwd(), "sites.json"))
os.environ.setdefault("HDFS_APP_TYPE", "HdfsAuditLogApplication")
