"""
Flask Extensions Module

This module initializes all Flask extensions used in the application.
Extensions are initialized here and then attached to the app in the factory.
"""

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Initialize extensions
# These will be attached to the app in create_app()
db = SQLAlchemy()
migrate = Migrate()
