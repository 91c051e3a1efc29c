"""
WSGI Entry Point for the trafficlog Application

This module serves as the entry point for WSGI servers (like Gunicorn)
to run the Flask application in production environments.
"""

import os
import sys

# Load .env ONLY for local development. In production, environment variables
# must be provided by the platform.
if os.environ.get('FLASK_CONFIG', '').lower() != 'production':
    from dotenv import load_dotenv

    load_dotenv(override=False)

from trafficlog import create_app

# Determine configuration name.
config_name = (os.getenv('FLASK_CONFIG') or 'development').lower()

print(f'Initializing Flask application with config: {config_name}', file=sys.stderr)

app = create_app(config_name)
