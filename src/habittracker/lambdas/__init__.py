"""
AWS Lambda functions for the habit tracker.

Modules:
    api_handler: REST API endpoints for rendering and toggling tracker blocks
"""

# Handlers are referenced by module path from the SAM template
