# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for listenstats.

Commands are organized into separate modules:
- shared.py: Colors, box drawing and logging helpers
- listeners.py: The listener report
- config.py: Configuration display
- db.py: Schema initialization
- status.py: Service health
"""
