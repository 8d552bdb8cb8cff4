#!/usr/bin/env python3
"""
GitHub Repository Traffic Charts Web Server

Serves visitor charts as PNG images and handles the GitHub OAuth flow that
registers the tokens used to read repository traffic.
"""

import http.server
import logging
import re
import urllib.parse
from http import HTTPStatus
from typing import Optional

from .auth import register_user_token
from .config import Settings
from .context import AppContext, create_app_context
from .errors import InvalidStateError, TokenNotFound, TrafficChartsError

PROJECT_URL = "https://github.com/fiatjaf/ght"
CHART_PATH = re.compile(r"^/([^/]+)/([^/]+?)/?$")

logger = logging.getLogger(__name__)


def is_path_segment(name: str) -> bool:
    """True when an unquoted owner or repo name can't escape its place in a GitHub API path."""
    return bool(name) and "/" not in name and name not in (".", "..")


class ChartServer(http.server.ThreadingHTTPServer):
    """Threaded HTTP server carrying the application context for its handlers."""
    daemon_threads = True

    def __init__(self, server_address, context: AppContext):
        self.context = context
        super().__init__(server_address, ChartRequestHandler)


class ChartRequestHandler(http.server.BaseHTTPRequestHandler):
    """A custom request handler to serve traffic charts."""

    server_version = "git-traffic-charts/1.0"

    @property
    def context(self) -> AppContext:
        return self.server.context

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)

    def _send_text(self, body: str, status: HTTPStatus = HTTPStatus.OK):
        """Send a plain text response."""
        data = body.encode('utf-8')
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _redirect(self, location: str):
        self.send_response(HTTPStatus.FOUND)
        self.send_header("Location", location)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        """Handle GET requests."""
        parsed_path = urllib.parse.urlparse(self.path)
        path = parsed_path.path
        query_params = urllib.parse.parse_qs(parsed_path.query)

        if path == "/":
            self._redirect(PROJECT_URL)
        elif path == "/_authorize":
            self.send_authorize_redirect()
        elif path == "/_callback":
            self.handle_callback(
                query_params.get('code', [None])[0],
                query_params.get('state', [None])[0]
            )
        elif match := CHART_PATH.match(path):
            user, repo = (urllib.parse.unquote(part) for part in match.groups())
            if is_path_segment(user) and is_path_segment(repo):
                self.send_chart(user, repo, query_params.get('user', [None])[0])
            else:
                self._send_text("Not Found", HTTPStatus.NOT_FOUND)
        else:
            self._send_text("Not Found", HTTPStatus.NOT_FOUND)

    def send_authorize_redirect(self):
        """Send the user to GitHub's consent page."""
        state = self.context.states.create_state()
        self._redirect(self.context.oauth.get_authorization_url(self.context.settings.callback_url, state))

    def handle_callback(self, code: Optional[str], state: Optional[str]):
        """Exchange the OAuth code and register the resulting token."""
        if not code:
            self._send_text("Missing 'code' parameter", HTTPStatus.BAD_REQUEST)
            return

        try:
            self.context.states.validate_state(state)
            register_user_token(self.context.oauth, self.context.tokens, code,
                                self.context.settings.callback_url)
        except InvalidStateError as e:
            logger.warning(f"Rejected OAuth callback: {e}")
            self._send_text(str(e), HTTPStatus.BAD_REQUEST)
            return
        except TrafficChartsError as e:
            logger.error(f"OAuth callback failed: {e}")
            self._send_text("Internal Server Error", HTTPStatus.INTERNAL_SERVER_ERROR)
            return

        self._send_text("done.")

    def send_chart(self, user: str, repo: str, auth_user: Optional[str] = None):
        """Serve the visitor chart of a repository as a PNG."""
        try:
            result = self.context.charts.render_chart(user, repo, auth_user or None)
        except TokenNotFound as e:
            self._send_text(str(e), HTTPStatus.NOT_FOUND)
            return
        except TrafficChartsError as e:
            logger.error(f"Failed to build chart for {user}/{repo}: {e}")
            self._send_text("Internal Server Error", HTTPStatus.INTERNAL_SERVER_ERROR)
            return
        except Exception as e:
            logger.exception(f"Unexpected error building chart for {user}/{repo}: {e}")
            self._send_text("Internal Server Error", HTTPStatus.INTERNAL_SERVER_ERROR)
            return

        try:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", "image/png")
            self.send_header("Cache-Control", "no-cache")
            self.send_header("Expires", result.expires)
            self.send_header("Content-Length", str(len(result.png)))
            self.end_headers()
            self.wfile.write(result.png)
        except (BrokenPipeError, ConnectionResetError):
            logger.info(f"Client went away before the chart for {result.repo_id} was sent")


def create_server(context: AppContext, host: str = "", port: Optional[int] = None) -> ChartServer:
    """Create (but don't start) the chart server. Port 0 picks a free port."""
    if port is None:
        port = context.settings.port
    return ChartServer((host, port), context)


def run_server(settings: Settings):
    """
    Run the chart web server until interrupted.

    Args:
        settings: Loaded configuration
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    context = create_app_context(settings)
    with create_server(context) as httpd:
        logger.info(f"Starting server on port {settings.port}")
        logger.info(f"Authorize at {settings.host.rstrip('/')}/_authorize")

        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Server stopped by user")
