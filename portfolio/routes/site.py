import os

from flask import Blueprint, current_app, send_from_directory
from werkzeug.routing import PathConverter

from portfolio.errors import APIError

site_bp = Blueprint('site', __name__)


class FrontendPathConverter(PathConverter):
    """A path that never starts with ``api``, so unknown API routes stay 404."""

    regex = r'(?!api(?:/|$))[^/].*?'


# --- SPA catch-all ---
@site_bp.route('/', defaults={'path': ''}, methods=['GET'])
@site_bp.route('/<frontend:path>', methods=['GET'])
def frontend(path):
    dist = current_app.config['FRONTEND_DIST']
    # built assets are served as-is; every other path is a client-side route
    if path and os.path.isfile(os.path.join(dist, path)):
        return send_from_directory(dist, path)
    if not os.path.isfile(os.path.join(dist, 'index.html')):
        raise APIError(404, 'Frontend build not found', 'NOT_FOUND')
    return send_from_directory(dist, 'index.html')
