import json

from excedencia.engine.salvage import (
    UNKNOWN_PATH,
    diagnostic_texts,
    extract_validation_errors,
    from_heuristic,
    from_markers,
    from_pointer_text,
    from_structured,
)

ENUM_MESSAGE = '"hermano" is not one of ["padre","madre"]'

VALIDATION = {
    "type": "Validation",
    "source": {"errors": [{"path": "/input/parentesco", "message": ENUM_MESSAGE}]},
}

# What the zen binding raises when the input node's schema rejects a field:
# a NodeError object followed by the native backtrace.
ZEN_NODE_ERROR = (
    '{"type":"NodeError","source":"/input/parentesco: \\"hermano\\" is not one of '
    '\\"padre\\", \\"madre\\" or 8 other candidates","nodeId":"5d4c3a1e-8b1f-4c2a-9e57-0f6d2b7a9c10"}'
    "\n\nStack backtrace:\n   0: <unknown>\n   1: <unknown>\n"
)
ZEN_ENUM_MESSAGE = '"hermano" is not one of "padre", "madre" or 8 other candidates'


def pairs(issues):
    return [(i.message, i.path) for i in issues]


def test_structured_validation_payload():
    assert pairs(from_structured(VALIDATION)) == [(ENUM_MESSAGE, "/input/parentesco")]


def test_structured_from_exception_text():
    err = RuntimeError(json.dumps(VALIDATION))
    assert pairs(extract_validation_errors(err)) == [(ENUM_MESSAGE, "/input/parentesco")]


def test_structured_follows_node_error_source():
    node_error = {
        "type": "NodeError",
        "nodeId": "5d4c3a1e",
        "source": json.dumps(VALIDATION),
    }
    err = RuntimeError(json.dumps(node_error))
    assert pairs(extract_validation_errors(err)) == [(ENUM_MESSAGE, "/input/parentesco")]


def test_node_error_cause_is_scanned_first():
    node_error = {"type": "NodeError", "nodeId": "n1", "source": "plain cause text"}
    texts = diagnostic_texts(RuntimeError(json.dumps(node_error)))
    assert texts[0] == "plain cause text"
    assert len(texts) == 2


def test_marker_inside_noise():
    text = (
        'thread worker panicked: Error { inner: '
        '{"source":{"errors":[{"message":"m","path":"p"}]},"type":"Validation"}'
        ' } at engine/src/handler.rs:42'
    )
    assert pairs(extract_validation_errors(RuntimeError(text))) == [("m", "p")]


def test_marker_without_source_envelope():
    text = 'noise {"errors":[{"message":"m2","path":"/input/situacion"}],"type":"Validation"} tail'
    assert pairs(from_markers(text)) == [("m2", "/input/situacion")]


def test_bare_errors_list_marker():
    text = 'context "errors":[{"message":"m3","path":"/input/numero_hijos"}] trailing'
    assert pairs(from_markers(text)) == [("m3", "/input/numero_hijos")]


def test_heuristic_with_sentinel_path():
    text = 'Validation failed: "message":"X is not one of [...]" and nothing else'
    assert from_markers(text) == []
    assert pairs(extract_validation_errors(text)) == [("X is not one of [...]", UNKNOWN_PATH)]


def test_heuristic_picks_up_path():
    text = 'failure: "message":"bad is not one of [a]","path":"/input/situacion"'
    assert pairs(from_heuristic(text)) == [("bad is not one of [a]", "/input/situacion")]


def test_heuristic_rescues_undecodable_marker():
    # missing comma between message and path: the envelope does not parse
    text = '{"source":{"errors":[{"message":"Y is not one of [z]" "path":"/input/parentesco"}]},"type":"Validation"}'
    assert from_markers(text) == []
    assert pairs(extract_validation_errors(text)) == [("Y is not one of [z]", "/input/parentesco")]


def test_heuristic_needs_enum_phrase():
    assert from_heuristic('"message":"something else went wrong"') == []


def test_non_validation_failure_is_opaque():
    assert extract_validation_errors(RuntimeError("decision graph has a cycle")) == []
    assert extract_validation_errors({"type": "DepthLimitExceeded"}) == []


def test_empty_error_list_is_not_validation():
    assert extract_validation_errors({"type": "Validation", "source": {"errors": []}}) == []


def test_zen_node_error_with_backtrace():
    issues = extract_validation_errors(RuntimeError(ZEN_NODE_ERROR))
    assert pairs(issues) == [(ZEN_ENUM_MESSAGE, "/input/parentesco")]


def test_zen_node_error_cause_ignores_backtrace():
    texts = diagnostic_texts(RuntimeError(ZEN_NODE_ERROR))
    assert texts[0].startswith("/input/parentesco: ")
    assert "Stack backtrace" in texts[1]


def test_pointer_text_one_issue_per_line():
    text = '/input/parentesco: bad relationship\n/input/situacion: bad trigger\nnot a pointer line'
    assert pairs(from_pointer_text(text)) == [
        ("bad relationship", "/input/parentesco"),
        ("bad trigger", "/input/situacion"),
    ]


def test_node_error_with_plain_cause_is_opaque():
    err = RuntimeError('{"type":"NodeError","source":"Failed to evaluate expression","nodeId":"n1"}\n\nStack backtrace:\n')
    assert extract_validation_errors(err) == []
