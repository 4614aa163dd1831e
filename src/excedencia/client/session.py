from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import requests

from excedencia.logs import get_logger

logger = get_logger(__name__)

SESSION_HEADER = "mcp-session-id"


class SessionError(RuntimeError):
    pass


def _headers(session_id: Optional[str] = None) -> Dict[str, str]:
    h = {
        "Content-Type": "application/json",
        "Accept": "application/json, text/event-stream",
    }
    if session_id:
        h[SESSION_HEADER] = session_id
    return h


def parse_body(text: str) -> Optional[Any]:
    """
    Decode a JSON-RPC reply that may be SSE framed:
      event: message
      id: ...
      data: {...}
    Returns None when nothing decodes.
    """
    text = (text or "").strip()
    if not text:
        return None

    data_lines: List[str] = [
        line[len("data:"):].strip()
        for line in text.splitlines()
        if line.startswith("data:")
    ]
    candidate = "\n".join(data_lines) if data_lines else text
    try:
        return json.loads(candidate)
    except ValueError:
        return None


class McpSession:
    """Minimal streamable-HTTP MCP client: initialize, then JSON-RPC calls on the session."""

    def __init__(
        self,
        url: str,
        timeout: float = 30,
        protocol_version: str = "2024-11-05",
        client_name: str = "excedencia-session",
        http: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.protocol_version = protocol_version
        self.client_name = client_name
        self.http = http or requests.Session()
        self.session_id: Optional[str] = None
        self._next_id = 1

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        r = self.http.post(
            self.url,
            data=json.dumps(payload),
            headers=_headers(self.session_id),
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r

    def _request_id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid

    def initialize(self) -> Optional[Any]:
        r = self._post(
            {
                "jsonrpc": "2.0",
                "method": "initialize",
                "id": self._request_id(),
                "params": {
                    "protocolVersion": self.protocol_version,
                    "capabilities": {},
                    "clientInfo": {"name": self.client_name, "version": "1.0"},
                },
            }
        )
        session_id = (r.headers.get(SESSION_HEADER) or "").strip()
        if not session_id:
            raise SessionError(f"Failed to get session ID from {self.url}: {r.text[:200]}")
        self.session_id = session_id
        logger.info("session_initialized", url=self.url, session_id=session_id)

        # required before any other request on the session
        self._post({"jsonrpc": "2.0", "method": "notifications/initialized"})
        return parse_body(r.text)

    def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        if not self.session_id:
            self.initialize()
        payload: Dict[str, Any] = {"jsonrpc": "2.0", "method": method, "id": self._request_id()}
        if params is not None:
            payload["params"] = params
        r = self._post(payload)
        return parse_body(r.text)

    def list_tools(self) -> Optional[Any]:
        return self.request("tools/list")

    def list_resources(self) -> Optional[Any]:
        return self.request("resources/list")

    def list_prompts(self) -> Optional[Any]:
        return self.request("prompts/list")

    def call_tool(self, name: str, arguments: Dict[str, Any]) -> Optional[Any]:
        return self.request("tools/call", {"name": name, "arguments": arguments})


def tool_text(reply: Optional[Any]) -> str:
    """Concatenated text content of a tools/call reply (result or error)."""
    if not isinstance(reply, dict):
        return ""
    if "error" in reply:
        err = reply["error"] or {}
        return str(err.get("message", err))
    content = (reply.get("result") or {}).get("content") or []
    return "\n".join(str(c.get("text", "")) for c in content if isinstance(c, dict))


def run_sequence(session: McpSession, tool_name: str, examples: List[Dict[str, Any]]) -> None:
    print(f"Connecting to {session.url}")
    session.initialize()
    print(f"Session: {session.session_id}")

    for label, call in (
        ("tools", session.list_tools),
        ("resources", session.list_resources),
        ("prompts", session.list_prompts),
    ):
        reply = call()
        print(f"\n{label}/list:")
        print(json.dumps(reply, indent=2, ensure_ascii=False))

    for args in examples:
        reply = session.call_tool(tool_name, args)
        is_error = bool(isinstance(reply, dict) and (reply.get("result") or {}).get("isError"))
        print(f"\ntools/call {json.dumps(args, ensure_ascii=False)}{' [error]' if is_error else ''}:")
        print(tool_text(reply))
