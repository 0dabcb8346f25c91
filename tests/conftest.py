"""Test configuration and fixtures."""

import os

# Keep password hashing fast; production uses the configured work factor
os.environ.setdefault("SECURITY__PASSWORD_ITERATIONS", "1000")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ADMIN__PASSWORD", "test-admin-password")
