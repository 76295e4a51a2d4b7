"""Flask application factory for the py-memviz web UI.

The ``create_app`` function creates a session and returns a Flask app
whose JSON endpoints expose it:

- ``GET /`` — the visualizer page.
- ``/api/processes`` — list, add and remove processes.
- ``GET /api/paging`` / ``GET /api/segmentation`` — tables plus
  fragmentation figures.
- ``GET /api/allocation`` / ``GET /api/comparison`` /
  ``GET /api/statistics`` — allocation strategies and the dashboard.
- ``POST /api/translate`` — virtual → physical address translation.
- ``/api/heatmap``, ``/api/playback`` and ``/api/animation`` — timed
  views.  Each accepts a ``tick`` action; the page drives all of them at
  once with ``POST /api/tick``.
- ``GET /api/log`` — the session event log.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flask import Flask, Response, jsonify, render_template, request

from py_memviz.formatting import process_color
from py_memviz.logging import LogLevel
from py_memviz.memory.allocation import FitStrategy
from py_memviz.memory.fragmentation import segment_layout
from py_memviz.memory.translator import TranslationError
from py_memviz.playback import PlaybackError
from py_memviz.processes import InvalidInputError
from py_memviz.session import Session

if TYPE_CHECKING:
    from py_memviz.heatmap import AccessSampler

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404
_HTTP_CREATED = 201


def _error(message: str, status: int = _HTTP_BAD_REQUEST) -> tuple[Response, int]:
    return jsonify({"error": message}), status


def _json_body() -> dict[str, Any] | None:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def create_app(*, sampler: AccessSampler | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        sampler: Heat-map access sampler; tests pass a deterministic one.

    Returns:
        A configured Flask application ready to serve.

    """
    session = Session(sampler=sampler)

    app = Flask(__name__)
    app.config["SESSION_STATE"] = session

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the visualizer page."""
        return render_template("index.html", strategies=[s.value for s in FitStrategy])

    # -- Processes ----------------------------------------------------------

    @app.route("/api/processes", methods=["GET"])
    def list_processes() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the process list with display colours."""
        return jsonify(
            {
                "processes": [
                    {**p.to_dict(), "color": process_color(p.id)} for p in session.processes
                ],
                "next_id": session.table.next_id,
                "total_size": session.table.total_size,
            }
        )

    @app.route("/api/processes", methods=["POST"])
    def add_process() -> tuple[Response, int]:  # pyright: ignore[reportUnusedFunction]
        """Add a process.

        Expects JSON body: ``{"size": ...}``
        """
        data = _json_body()
        if data is None or "size" not in data:
            return _error("Missing 'size' field")
        try:
            process = session.add_process(data["size"])
        except InvalidInputError as exc:
            return _error(str(exc))
        return jsonify(process.to_dict()), _HTTP_CREATED

    @app.route("/api/processes/<int:process_id>", methods=["DELETE"])
    def remove_process(process_id: int) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Remove a process by id."""
        removed = session.remove_process(process_id)
        if removed is None:
            return _error(f"Process {process_id} not found", _HTTP_NOT_FOUND)
        return jsonify(removed.to_dict())

    # -- Paging and segmentation --------------------------------------------

    @app.route("/api/paging")
    def paging() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the page table and paging fragmentation."""
        return jsonify(
            {
                "page_table": [e.to_dict() for e in session.page_table()],
                "fragmentation": session.fragmentation().paging.to_dict(),
            }
        )

    @app.route("/api/segmentation")
    def segmentation() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the segment table, gapped layout and fragmentation."""
        return jsonify(
            {
                "segment_table": [e.to_dict() for e in session.segment_table()],
                "layout": [
                    {
                        "process_id": p.process_id,
                        "start": p.start,
                        "size": p.size,
                        "gap_after": p.gap_after,
                    }
                    for p in segment_layout(session.processes)
                ],
                "fragmentation": session.fragmentation().segmentation.to_dict(),
            }
        )

    # -- Allocation ---------------------------------------------------------

    @app.route("/api/allocation")
    def allocation() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run one strategy, chosen by the ``strategy`` query parameter."""
        strategy = request.args.get("strategy", FitStrategy.FIRST_FIT.value)
        try:
            result = session.allocate(strategy)
        except ValueError as exc:
            return _error(str(exc))
        return jsonify(result.to_dict())

    @app.route("/api/comparison")
    def comparison() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return all three strategies side by side."""
        return jsonify({"strategies": [s.to_dict() for s in session.comparison()]})

    @app.route("/api/statistics")
    def statistics() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the dashboard figures."""
        return jsonify(session.statistics().to_dict())

    # -- Translation --------------------------------------------------------

    @app.route("/api/translate", methods=["POST"])
    def translate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Translate a virtual address.

        Expects JSON body: ``{"address": ..., "process_id": ..., "mode": ...}``
        """
        data = _json_body()
        if data is None or "address" not in data or "process_id" not in data:
            return _error("Missing 'address' or 'process_id' field")
        mode = data.get("mode", "paging")
        try:
            result = session.translate(data["address"], data["process_id"], mode)
        except (InvalidInputError, TranslationError) as exc:
            return _error(str(exc))
        except ValueError:
            return _error(f"Unknown translation mode {mode!r}")
        return jsonify(result.to_dict())

    # -- Timed views --------------------------------------------------------

    @app.route("/api/tick", methods=["POST"])
    def tick() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Advance every timed view by one tick."""
        access = session.tick()
        return jsonify({"access": access.to_dict() if access is not None else None})

    @app.route("/api/heatmap")
    def heatmap() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the heat-map grid and recent accesses."""
        return jsonify(session.heatmap.to_dict())

    @app.route("/api/heatmap/<action>", methods=["POST"])
    def heatmap_action(action: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Toggle, reset or tick the heat-map simulation."""
        if action == "tick":
            session.heatmap.tick(session.processes)
        elif action == "toggle":
            session.heatmap.toggle(session.processes)
        elif action == "reset":
            session.heatmap.reset()
        else:
            return _error(f"Unknown heat map action {action!r}", _HTTP_NOT_FOUND)
        return jsonify(session.heatmap.to_dict())

    @app.route("/api/playback")
    def playback() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the allocation simulator state."""
        return jsonify(session.playback.to_dict())

    @app.route("/api/playback/<action>", methods=["POST"])
    def playback_action(action: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Drive the allocation simulator.

        Actions: ``play``, ``pause``, ``toggle``, ``step``, ``back``,
        ``reset``, ``tick``, ``strategy`` and ``speed`` (the last two read
        ``{"value": ...}`` from the JSON body).
        """
        player = session.playback
        data = _json_body() or {}
        try:
            if action == "play":
                player.play()
            elif action == "pause":
                player.pause()
            elif action == "toggle":
                player.toggle()
            elif action == "step":
                player.step_forward()
            elif action == "back":
                player.step_back()
            elif action == "reset":
                player.reset()
            elif action == "tick":
                player.tick()
            elif action == "strategy":
                player.set_strategy(str(data.get("value", "")))
            elif action == "speed":
                player.set_speed(int(data.get("value", 0)))
            else:
                return _error(f"Unknown playback action {action!r}", _HTTP_NOT_FOUND)
        except (PlaybackError, TypeError, ValueError) as exc:
            session.logger.log(LogLevel.WARNING, str(exc), source="playback")
            return _error(str(exc))
        return jsonify(player.to_dict())

    @app.route("/api/animation")
    def animation() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the allocation animation state."""
        return jsonify(session.animation.to_dict())

    @app.route("/api/animation/<action>", methods=["POST"])
    def animation_action(action: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Drive the allocation animation (play, pause, step, reset, tick, strategy, speed)."""
        player = session.animation
        data = _json_body() or {}
        try:
            if action == "play":
                player.play()
            elif action == "pause":
                player.pause()
            elif action == "step":
                player.step_forward()
            elif action == "reset":
                player.reset()
            elif action == "tick":
                player.tick()
            elif action == "strategy":
                player.set_strategy(str(data.get("value", "")))
            elif action == "speed":
                player.set_speed(int(data.get("value", 0)))
            else:
                return _error(f"Unknown animation action {action!r}", _HTTP_NOT_FOUND)
        except (TypeError, ValueError) as exc:
            return _error(str(exc))
        return jsonify(player.to_dict())

    # -- Log ----------------------------------------------------------------

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the session event log, optionally filtered by ``level``."""
        level_name = (request.args.get("level") or "").upper()
        min_level = LogLevel[level_name] if level_name in LogLevel.__members__ else None
        entries = session.logger.filter(min_level=min_level)
        return jsonify({"entries": [e.to_dict() for e in entries]})

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``py-memviz-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
