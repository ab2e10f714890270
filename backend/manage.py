"""
Convenience wrapper around the Flask CLI:
    python manage.py run
    python manage.py create-admin admin@example.com 'S3cret!pass'
    flask db upgrade   (with FLASK_APP=wsgi.py)
"""

import os

from flask.cli import main

if __name__ == "__main__":
    os.environ.setdefault("FLASK_APP", "wsgi.py")
    main()
