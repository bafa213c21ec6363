"""
WSGI entry point (gunicorn wsgi:app, or `python wsgi.py` for local dev).
"""
import atexit

from englishpath import create_app
from englishpath.services import EXTENSION_KEY

app = create_app()
atexit.register(app.extensions[EXTENSION_KEY].close)

if __name__ == "__main__":
    app.run(debug=True, threaded=True)
