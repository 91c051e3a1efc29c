"""Local development server.

Creates the request log table when missing, then serves the app.
"""

import os

from wsgi import app
from trafficlog.extensions import db


if __name__ == '__main__':
    with app.app_context():
        db.create_all()

    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', 5000))
    app.run(host=host, port=port)
