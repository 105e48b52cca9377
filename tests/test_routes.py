import pytest
from flask import Flask, jsonify, make_response

from jobboard.routes import Router


class FakeApp:
    def __init__(self):
        self.runs = []

    def run(self, host, port):
        self.runs.append((host, port))


def recorder(log, name):
    def middleware(call_next):
        log.append(name)
        return call_next()

    return middleware


def test_middlewares_run_in_order_before_handler():
    app = Flask(__name__)
    router = Router(app)
    log = []
    router.use(recorder(log, "global"))

    def handler():
        log.append("handler")
        return "done"

    router.get("/ping", handler, recorder(log, "route"))
    response = app.test_client().get("/ping")
    assert response.get_data(as_text=True) == "done"
    assert log == ["global", "route", "handler"]


def test_path_parameters_are_passed_by_name():
    app = Flask(__name__)
    router = Router(app)
    router.delete("/items/:id", lambda id: jsonify({"id": id}))
    response = app.test_client().delete("/items/abc")
    assert response.get_json() == {"id": "abc"}


def test_same_uri_with_several_methods():
    app = Flask(__name__)
    router = Router(app)
    router.post("/job", lambda: "posted")
    router.put("/job", lambda: "updated")
    client = app.test_client()
    assert client.post("/job").get_data(as_text=True) == "posted"
    assert client.put("/job").get_data(as_text=True) == "updated"


def test_middleware_can_answer_early():
    app = Flask(__name__)
    router = Router(app)
    calls = []

    def deny(call_next):
        return make_response("denied", 403)

    def handler():
        calls.append("handler")
        return "ok"

    router.get("/secret", handler, deny)
    response = app.test_client().get("/secret")
    assert response.status_code == 403
    assert calls == []


def test_global_middleware_runs_for_unknown_paths():
    app = Flask(__name__)
    router = Router(app)

    def tag(call_next):
        response = make_response(call_next())
        response.headers["X-Tag"] = "seen"
        return response

    router.use(tag)
    router.post("/only-post", lambda: "ok")
    client = app.test_client()
    missing = client.get("/missing")
    wrong_method = client.get("/only-post")
    assert missing.status_code == 404
    assert missing.headers["X-Tag"] == "seen"
    assert wrong_method.status_code == 404
    assert wrong_method.headers["X-Tag"] == "seen"


def test_global_middleware_added_later_skips_earlier_routes():
    app = Flask(__name__)
    router = Router(app)
    log = []
    router.get("/early", lambda: "early")
    router.use(recorder(log, "global"))
    router.get("/late", lambda: "late")
    client = app.test_client()
    client.get("/early")
    client.get("/late")
    assert log == ["global"]


def test_serve_listens_on_all_interfaces(capsys):
    app = FakeApp()
    Router(app).serve(":9000")
    assert app.runs == [("0.0.0.0", 9000)]
    assert capsys.readouterr().out == "Server running in port :9000 "


def test_serve_with_host():
    app = FakeApp()
    Router(app).serve("127.0.0.1:9001")
    assert app.runs == [("127.0.0.1", 9001)]


def test_serve_rejects_bad_port():
    app = FakeApp()
    with pytest.raises(SystemExit):
        Router(app).serve(":http-ish")
    assert app.runs == []