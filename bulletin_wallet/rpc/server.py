"""
JSON-RPC over HTTP: the dispatcher and the threaded server

One thread serves each request. The same server class runs the bootstrap gate and the full wallet service, with
a different dispatcher.
"""
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Optional

from bulletin_wallet.core import get_logger
from bulletin_wallet.rpc.errors import JSONRPCError, RPCErrorCode, to_rpc_error

__all__ = ["RPCDispatcher", "RPCServer"]

logger = get_logger(__name__)


class RPCDispatcher:
    """
    Routes JSON-RPC requests to handler(context, params)
    """

    def __init__(self, handlers: dict[str, Callable[[Any, Any], Any]], context: Any = None):
        self.handlers = handlers
        self.context = context

    def call(self, method: str, params=None):
        handler = self.handlers.get(method)
        if handler is None:
            raise JSONRPCError(RPCErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")
        return handler(self.context, params)

    def handle_request(self, request) -> dict:
        request_id = request.get("id") if isinstance(request, dict) else None
        try:
            if not isinstance(request, dict) or not isinstance(request.get("method"), str):
                raise JSONRPCError(RPCErrorCode.INVALID_REQUEST, "Invalid request")
            method = request["method"]
            logger.debug(f"RPC request {method} (id={request_id})")
            result = self.call(method, request.get("params"))
            return {"result": result, "error": None, "id": request_id}
        except Exception as e:
            error = to_rpc_error(e)
            if error.code == RPCErrorCode.INTERNAL_ERROR:
                logger.exception(f"Internal error serving request id={request_id}")
            else:
                logger.debug(f"Request id={request_id} failed: {error}")
            return {"result": None, "error": error.to_dict(), "id": request_id}

    def dispatch(self, body: bytes):
        """
        Decode the raw request body and return the response object (a list for batch requests)
        """
        try:
            payload = json.loads(body)
        except (ValueError, UnicodeDecodeError):
            error = JSONRPCError(RPCErrorCode.PARSE_ERROR, "Parse error")
            return {"result": None, "error": error.to_dict(), "id": None}

        if isinstance(payload, list):
            if not payload:
                error = JSONRPCError(RPCErrorCode.INVALID_REQUEST, "Empty batch")
                return {"result": None, "error": error.to_dict(), "id": None}
            return [self.handle_request(r) for r in payload]
        return self.handle_request(payload)


class _RPCRequestHandler(BaseHTTPRequestHandler):
    server: "_HTTPServer"

    def do_POST(self):
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length)
        response = json.dumps(self.server.dispatcher.dispatch(body)).encode("utf-8")

        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(response)))
        self.end_headers()
        self.wfile.write(response)

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


class _HTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], dispatcher: RPCDispatcher):
        super().__init__(address, _RPCRequestHandler)
        self.dispatcher = dispatcher


class RPCServer:
    def __init__(self, dispatcher: RPCDispatcher, host: str = "127.0.0.1", port: int = 0, name: str = "rpc"):
        self.dispatcher = dispatcher
        self.name = name
        self._httpd = _HTTPServer((host, port), dispatcher)
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> tuple[str, int]:
        host, port = self._httpd.server_address[:2]
        return host, port

    @property
    def url(self) -> str:
        host, port = self.address
        return f"http://{host}:{port}"

    def start(self):
        self._thread = threading.Thread(target=self._httpd.serve_forever, name=f"{self.name}-server", daemon=True)
        self._thread.start()
        logger.info(f"{self.name} server listening on {self.url}")

    def shutdown(self):
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        logger.info(f"{self.name} server stopped")
