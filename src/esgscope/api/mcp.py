import logging

from flask import Blueprint, jsonify, request

from esgscope.tools import ToolDispatcher

logger = logging.getLogger(__name__)

bp = Blueprint("mcp", __name__)

dispatcher = ToolDispatcher()


@bp.route("/capabilities", methods=["GET"])
def capabilities():
    """Server capabilities and tool schema."""
    return jsonify(dispatcher.get_capabilities())


@bp.route("/execute", methods=["POST"])
def execute():
    """Execute a tool."""
    data = request.get_json(silent=True) or {}
    tool = data.get("tool")
    logger.info("Tool execution requested: %s", tool)

    if not isinstance(tool, str) or not tool.strip():
        return jsonify({"error": "Tool name is required"}), 400

    result = dispatcher.execute_tool(tool, data.get("parameters") or {})
    return jsonify(result)
