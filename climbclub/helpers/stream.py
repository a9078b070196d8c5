import queue

from flask import Response, current_app, request, stream_with_context


def sse_message(data: str, event: str = "update") -> str:
    lines = "".join(f"data: {line}\n" for line in (data.splitlines() or [""]))
    return f"event: {event}\n{lines}\n"


def live_view_stream(services, build_view, render, keepalive: float = 15.0) -> Response:
    """
    Server-sent events for a live view.

    build_view(on_change) must return an object with close(); every snapshot
    it receives re-renders it and pushes the HTML to the browser. The view
    (and its subscriptions) is closed when the client goes away.
    """

    @stream_with_context
    def generate():
        changes = queue.Queue()
        view = build_view(lambda _view: changes.put(True))
        # Listeners refresh on the writer's thread; this one only waits
        services.store.release()
        current_app.logger.info("Stream opened path=%s", request.full_path)
        try:
            while True:
                try:
                    changes.get(timeout=keepalive)
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue

                # Coalesce a burst of writes into one render
                while True:
                    try:
                        changes.get_nowait()
                    except queue.Empty:
                        break

                yield sse_message(render(view))
        finally:
            view.close()
            current_app.logger.info("Stream closed path=%s", request.full_path)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
