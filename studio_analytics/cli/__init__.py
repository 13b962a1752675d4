# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for studio analytics.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- analytics.py: Funnel and summary reports
- data.py: Loading and deleting stored data
- db.py: Schema creation and connectivity check
- config.py: Configuration display
- server.py: HTTP API server
"""
