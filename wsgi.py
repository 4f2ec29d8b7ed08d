"""
WSGI entry point.

  gunicorn wsgi:application
or, on PythonAnywhere, point the WSGI file at this module.
Startup fails if the data directory holds no usable word files.
"""
import sys
import os

# Make sure the project directory is on the path
project_dir = os.path.dirname(os.path.abspath(__file__))
if project_dir not in sys.path:
    sys.path.insert(0, project_dir)

from app import create_app  # noqa: E402

application = create_app()
