from __future__ import annotations

import argparse
import asyncio
import json
import sys

from excedencia.client.session import McpSession, run_sequence, tool_text
from excedencia.config.settings import Settings, read_settings
from excedencia.engine.service import build_engine, evaluate_scenario
from excedencia.engine.shaping import response_to_json
from excedencia.errors import ExcedenciaError
from excedencia.logs import configure_logging
from excedencia.server.tool import TOOL_NAME, serve

# Same three cases the server instructions advertise.
EXAMPLE_CALLS = [
    {"relationship": "padre", "trigger": "parto", "singleParentFamily": True, "childCount": 1},
    {"relationship": "madre", "trigger": "enfermedad", "singleParentFamily": False},
    {"relationship": "madre", "trigger": "parto", "singleParentFamily": "false", "childCount": "3"},
]


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    transport = args.transport or settings.server.transport
    print(f"Serving '{settings.server.name}' over {transport}", file=sys.stderr)
    serve(settings, transport=transport)
    return 0


def _cmd_evaluate(args: argparse.Namespace, settings: Settings) -> int:
    params = {
        "relationship": args.relationship,
        "trigger": args.trigger,
        "singleParentFamily": args.single_parent,
        "childCount": args.child_count,
    }
    try:
        response = asyncio.run(evaluate_scenario(params, engine=build_engine(settings)))
    except ExcedenciaError as e:
        print(e.report(), file=sys.stderr)
        return 1
    print(response_to_json(response))
    return 0


def _cmd_session(args: argparse.Namespace, settings: Settings) -> int:
    session = McpSession(
        args.url or settings.client.url,
        timeout=settings.client.timeout,
        protocol_version=settings.client.protocol_version,
    )
    if args.mode == "auto":
        run_sequence(session, TOOL_NAME, EXAMPLE_CALLS)
        return 0

    arguments = json.loads(args.arguments)
    reply = session.call_tool(args.tool or TOOL_NAME, arguments)
    print(tool_text(reply))
    is_error = isinstance(reply, dict) and ("error" in reply or (reply.get("result") or {}).get("isError"))
    return 1 if is_error else 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="excedencia")
    p.add_argument("--config", default=None, help="YAML settings file (default: bundled settings.yaml)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_serve = sub.add_parser("serve", help="Run the MCP server")
    p_serve.add_argument("--transport", choices=["stdio", "sse", "streamable-http"], default=None)
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=_cmd_serve)

    p_eval = sub.add_parser("evaluate", help="Evaluate one scenario locally and print the result")
    p_eval.add_argument("--relationship", required=True)
    p_eval.add_argument("--trigger", required=True)
    p_eval.add_argument("--single-parent", required=True, help="true/false")
    p_eval.add_argument("--child-count", default=None)
    p_eval.set_defaults(func=_cmd_evaluate)

    p_sess = sub.add_parser("session", help="Talk to a running server over HTTP")
    p_sess.add_argument("mode", nargs="?", choices=["auto", "call"], default="auto")
    p_sess.add_argument("--url", default=None)
    p_sess.add_argument("--tool", default=None)
    p_sess.add_argument("--arguments", default="{}", help="tools/call arguments as JSON")
    p_sess.set_defaults(func=_cmd_session)

    args = p.parse_args(argv)
    settings = read_settings(args.config)
    configure_logging(settings.logging.level, settings.logging.format)
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
